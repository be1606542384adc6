# storefront/data/models/__init__.py
#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel

__all__ = ["CategoryModel", "ProductModel"]
