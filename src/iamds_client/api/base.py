"""
Base class for resource API groups.

A resource API is a thin, typed face over the operation table: each
``operation_method`` attribute names one row and becomes a callable that
binds arguments, runs the call through the shared ``ApiClient`` and
returns the deserialized body. Every sync method gets an ``_async`` twin.

Example:
    ```python
    class TenantApi(BaseApi):
        get_tenant = operation_method("GetTenant")

    tenants = TenantApi(api_client)
    tenant = tenants.get_tenant("t-1")
    envelope = tenants.get_tenant.with_http_info("t-1")
    tenant = await tenants.get_tenant_async("t-1")
    ```
"""

from typing import Any, Optional

from iamds_client.api_client import ApiClient
from iamds_client.operations import Operation, aexecute, execute, get_operation
from iamds_client.request import ResponseEnvelope

ASYNC_SUFFIX = "_async"


class BoundOperation:
    """An operation bound to one API instance."""

    def __init__(self, api: "BaseApi", operation: Operation, is_async: bool = False):
        self._api = api
        self.operation = operation
        self.is_async = is_async
        self.__doc__ = operation.summary

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.is_async:
            return self._acall(*args, **kwargs)
        return self.with_http_info(*args, **kwargs).data

    async def _acall(self, *args: Any, **kwargs: Any) -> Any:
        envelope = await self._aexecute(*args, **kwargs)
        return envelope.data

    def with_http_info(self, *args: Any, **kwargs: Any) -> Any:
        """Same call, returning the full ``ResponseEnvelope`` instead of the body."""
        if self.is_async:
            return self._aexecute(*args, **kwargs)
        return execute(self._api.api_client, self.operation, *args, **kwargs)

    async def _aexecute(self, *args: Any, **kwargs: Any) -> ResponseEnvelope:
        return await aexecute(self._api.api_client, self.operation, *args, **kwargs)

    def __repr__(self) -> str:
        suffix = ASYNC_SUFFIX if self.is_async else ""
        return f"<BoundOperation {self.operation.qualified_name}{suffix}>"


class operation_method:
    """Descriptor exposing one table row as a method."""

    def __init__(self, operation_name: str, *, is_async: bool = False):
        self.operation = get_operation(operation_name)
        self.is_async = is_async
        self.name: Optional[str] = None
        self.__doc__ = self.operation.summary

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional["BaseApi"], owner: type) -> Any:
        if instance is None:
            return self
        return BoundOperation(instance, self.operation, is_async=self.is_async)


class BaseApi:
    """
    Common base for the resource API groups.

    Args:
        api_client: Shared dispatcher; a default one is created when omitted
    """

    def __init__(self, api_client: Optional[ApiClient] = None):
        self.api_client = api_client or ApiClient()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name, attr in list(vars(cls).items()):
            if not isinstance(attr, operation_method) or attr.is_async:
                continue
            twin_name = f"{name}{ASYNC_SUFFIX}"
            if twin_name in vars(cls):
                continue
            twin = operation_method(attr.operation.name, is_async=True)
            twin.__set_name__(cls, twin_name)
            setattr(cls, twin_name, twin)

    @classmethod
    def operations(cls) -> dict:
        """Sync method name -> ``Operation`` for this API group."""
        return {
            name: attr.operation
            for klass in reversed(cls.__mro__)
            for name, attr in vars(klass).items()
            if isinstance(attr, operation_method) and not attr.is_async
        }
