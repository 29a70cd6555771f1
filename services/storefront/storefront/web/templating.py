from pathlib import Path

from fastapi.templating import Jinja2Templates

from storefront.cart.costs import format_currency
from storefront.web.cdn import ContentDeliveryNetwork, ContentDeliveryNetworkConfiguration

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
cdn = ContentDeliveryNetwork(ContentDeliveryNetworkConfiguration.from_settings())

templates.env.globals.update(cdn.template_globals())
templates.env.filters["currency"] = format_currency
