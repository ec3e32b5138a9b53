"""Campus entrance logger: geotagged entrance visits with an offline submission queue."""
from .const import VERSION

__version__ = VERSION
