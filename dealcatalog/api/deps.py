# dealcatalog/api/deps.py
from fastapi import Request
from dealcatalog.domain.services.catalog_svc import CatalogService

# Dependency for injecting the catalog service (built in lifespan) into endpoints
def catalog_dep(request: Request) -> CatalogService:
    return request.app.state.catalog
