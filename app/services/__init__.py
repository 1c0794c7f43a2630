# Services package.
#
#   product_service  : create / list / get / update / remove for Product
#
# Services receive their store through the constructor so the router
# layer (via ``app.dependencies``) decides which store and session back a
# request, and ``get_db`` owns the transaction boundary.
