# Repositories package.
#
#   base         : the ProductStore contract consumed by ProductService
#   sql_store    : async SQLAlchemy implementation over the products table
#   cached       : Redis read-through wrapper around any ProductStore
#
# Stores flush but never commit; the transaction boundary is owned by the
# ``get_db`` dependency in the router layer.
from app.repositories.base import ProductStore
from app.repositories.cached import CachingProductStore
from app.repositories.sql_store import SqlAlchemyProductStore

__all__ = ["ProductStore", "CachingProductStore", "SqlAlchemyProductStore"]
