"""
autobind Dependency Injection Module

Container with two lifetimes:
- bind(): new instance on every resolve
- singleton(): one instance per container, built on first resolve

Usage:
    from autobind.di import Container

    container = Container()
    container.singleton(Database, PostgresDatabase)
    container.bind(UserService)

    user_svc = container.resolve(UserService)

    # In FastAPI routes
    @app.get("/users")
    async def get_users(user_svc: UserService = Depends(inject(UserService))):
        return await user_svc.list_all()
"""

from .bindings import Binding
from .container import Container, Inject, bind, inject, resolve, singleton

__all__ = [
    "Container",
    "Binding",
    "bind",
    "singleton",
    "resolve",
    "inject",
    "Inject",
]
