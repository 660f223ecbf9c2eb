import aiohttp
from typing import Any, Dict, Mapping, Optional, Union
from marshmallow import Schema

from yarl import URL

from ddmanager.types.base import JSON

from .error import AuthenticationError, BackendError, NotFoundError

HEADERS = {
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
    "Content-Type": "application/json; charset=utf-8",
    "Connection": "keep-alive",
}

"""Default timeout in seconds"""
TIMEOUT: float = 10.0


class SessionManager:
    """Wrapped aiohttp session with JSON helpers and error mapping."""

    def __init__(
        self,
        headers: Optional[Mapping] = None,
        timeout: float = TIMEOUT,
    ) -> None:
        merged_headers = dict(**HEADERS)
        merged_headers.update(headers or {})
        self.headers = merged_headers
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """The underlying session, created on first use inside the running loop."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.headers, timeout=self.timeout
            )
        return self._session

    async def request(
        self,
        method: str,
        url: Union[str, URL],
        params: Optional[Dict[str, Any]] = None,
        data: Optional[JSON] = None,
        headers: Optional[Mapping] = None,
        schema: Optional[Schema] = None,
        many: bool = False,
    ) -> Any:
        """Run a wrapped session HTTP request.
        Args:
            method: The HTTP method.
            url: The url to request.
            params: query string parameters
            data: The JSON payload of the request.
            headers: A dict adding to and overriding the session headers.
            schema: An instance of a `marshmallow.Schema` that represents the object
                to build.
            many: Whether to treat the output as a list of the passed schema.
        Returns:
            A JSON dictionary or a constructed object if a schema is passed.
        Raises:
            ValueError: If the schema is not an instance of `Schema` and is instead
                a class.
            AuthenticationError: On 401 and 403 responses.
            NotFoundError: On 404 responses.
            BackendError: On any other error status.
        """
        # Guard against common gotcha, passing schema class instead of instance.
        if isinstance(schema, type):
            raise ValueError("Passed Schema should be an instance not a class.")

        async with self.session.request(
            method,
            str(url),
            params=params or None,
            json=data,
            headers=headers or None,
        ) as res:
            if res.status == 401:
                raise AuthenticationError(401, "Unauthorized")
            if res.status == 403:
                raise AuthenticationError(403, "Forbidden")
            if res.status == 404:
                raise NotFoundError()
            if res.status >= 400:
                raise BackendError(res.status, await res.text())
            if res.status == 204 or res.content_length == 0:
                return None
            body = await res.json(content_type=None)
            return body if schema is None else schema.load(body, many=many)

    async def get(self, url: Union[str, URL], **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: Union[str, URL], **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: Union[str, URL], **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: Union[str, URL], **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}<{self.headers.get('Host', '')}>"

    async def close(self) -> None:
        """Close the underlying session"""
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
