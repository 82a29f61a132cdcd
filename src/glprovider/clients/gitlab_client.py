"""GitLab client shared by every resource adapter."""

from collections.abc import Callable, Hashable
from typing import Any

import gitlab
import requests
from gitlab.exceptions import GitlabError

from glprovider.clients.pagination import Page, collect_pages
from glprovider.core.config import GitLabConfig, OperationsConfig
from glprovider.core.context import OperationContext
from glprovider.core.exceptions import (
    NotFoundError,
    RemoteError,
    RemoteTransientError,
    RemoteValidationError,
)
from glprovider.utils.logging import get_logger
from glprovider.utils.retry import retry_on_exception

logger = get_logger(__name__)

VALIDATION_STATUS_CODES = frozenset({400, 409, 422})


def translate_error(error: GitlabError, operation: str) -> RemoteError:
    """Map a python-gitlab error onto the provider's error hierarchy.

    The upstream message is kept verbatim in the resulting error.

    Args:
        error: Error raised by python-gitlab
        operation: Description of the failed call

    Returns:
        Provider error matching the HTTP status
    """
    code = error.response_code
    message = f"Failed to {operation}: {error}"

    if code == 404:
        return NotFoundError(message, status_code=code)
    if code in VALIDATION_STATUS_CODES:
        return RemoteValidationError(message, status_code=code)
    if code == 429 or (code is not None and code >= 500):
        return RemoteTransientError(message, status_code=code)
    return RemoteError(message, status_code=code)


class GitLabClient:
    """GitLab API client wrapper.

    The underlying ``gitlab.Gitlab`` handle is created once and shared
    read-only by all operations. Every call goes through :meth:`call`, which
    honours the operation context, translates errors and retries transient
    failures.
    """

    def __init__(
        self,
        url: str,
        token: str | None,
        ssl_verify: bool | str = True,
        client_cert: tuple[str, str] | None = None,
        early_auth_check: bool = True,
        max_retries: int = 3,
    ):
        """Initialize GitLab client.

        Args:
            url: GitLab instance URL
            token: Private, project, group or personal access token
            ssl_verify: False, True or a CA bundle path
            client_cert: (certificate, key) file paths for mutual TLS
            early_auth_check: Authenticate immediately to validate credentials
            max_retries: Attempts for transient failures

        Raises:
            RemoteError: If the early authentication check fails
        """
        self.url = url
        self.max_retries = max_retries
        self.gl = gitlab.Gitlab(url, private_token=token, ssl_verify=ssl_verify)

        if client_cert:
            self.gl.session.cert = client_cert

        if early_auth_check:
            try:
                self.gl.auth()
                logger.debug("gitlab_client_initialized", url=url)
            except GitlabError as e:
                logger.error("gitlab_auth_failed", url=url, error=str(e))
                raise RemoteError(
                    f"Failed to authenticate with GitLab: {e}", status_code=e.response_code
                ) from e

    @classmethod
    def from_config(cls, config: GitLabConfig, operations: OperationsConfig) -> "GitLabClient":
        """Build a client from provider configuration."""
        client_cert = None
        if config.client_cert and config.client_key:
            client_cert = (config.client_cert, config.client_key)

        return cls(
            url=config.base_url or "",
            token=config.token,
            ssl_verify=config.ssl_verify,
            client_cert=client_cert,
            early_auth_check=config.early_auth_check,
            max_retries=operations.max_retries,
        )

    def project(self, project: str | int) -> Any:
        """Lazy project handle; no request is made."""
        return self.gl.projects.get(project, lazy=True)

    def group(self, group: str | int) -> Any:
        """Lazy group handle; no request is made."""
        return self.gl.groups.get(group, lazy=True)

    def call(
        self,
        ctx: OperationContext,
        operation: str,
        func: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Invoke a python-gitlab method.

        Args:
            ctx: Operation context; checked before every attempt
            operation: Description used in logs and error messages
            func: Bound python-gitlab method
            *args: Positional arguments for func
            **kwargs: Keyword arguments for func

        Returns:
            Whatever func returns

        Raises:
            OperationCancelledError: If the context is cancelled
            RemoteError: If GitLab reports an error (after retries)
        """
        attempt = retry_on_exception(
            exceptions=(RemoteTransientError,),
            max_attempts=self.max_retries,
        )(self._execute)
        return attempt(ctx, operation, func, args, kwargs)

    def _execute(
        self,
        ctx: OperationContext,
        operation: str,
        func: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        ctx.check()

        call_kwargs = dict(kwargs)
        remaining = ctx.remaining()
        if remaining is not None:
            call_kwargs.setdefault("timeout", remaining)

        try:
            logger.debug("gitlab_request", operation=operation)
            return func(*args, **call_kwargs)

        except GitlabError as e:
            error = translate_error(e, operation)
            if isinstance(error, NotFoundError):
                logger.debug("gitlab_object_not_found", operation=operation)
            else:
                logger.error("gitlab_request_failed", operation=operation, error=str(e))
            raise error from e

        except requests.exceptions.RequestException as e:
            logger.warning("gitlab_connection_failed", operation=operation, error=str(e))
            raise RemoteTransientError(f"Failed to {operation}: {e}") from e

    def get(self, ctx: OperationContext, manager: Any, id: str | int | None = None, **kwargs: Any) -> Any:
        """Get one object from a manager (singleton managers take no id)."""
        operation = f"get {manager.path}" + (f"/{id}" if id is not None else "")
        if id is None:
            return self.call(ctx, operation, manager.get, **kwargs)
        return self.call(ctx, operation, manager.get, id, **kwargs)

    def create(self, ctx: OperationContext, manager: Any, data: dict[str, Any], **kwargs: Any) -> Any:
        """Create an object through a manager."""
        return self.call(ctx, f"create {manager.path}", manager.create, data, **kwargs)

    def update(
        self,
        ctx: OperationContext,
        manager: Any,
        id: str | int | None,
        data: dict[str, Any],
        **kwargs: Any,
    ) -> Any:
        """Update an object through a manager; returns the updated attributes."""
        operation = f"update {manager.path}" + (f"/{id}" if id is not None else "")
        return self.call(ctx, operation, manager.update, id, data, **kwargs)

    def delete(self, ctx: OperationContext, manager: Any, id: str | int, **kwargs: Any) -> None:
        """Delete an object through a manager."""
        self.call(ctx, f"delete {manager.path}/{id}", manager.delete, id, **kwargs)

    def list_page(
        self,
        ctx: OperationContext,
        manager: Any,
        page: int,
        per_page: int,
        **filters: Any,
    ) -> Page:
        """Fetch a single page of a list endpoint.

        The next page number comes from GitLab's ``X-Next-Page`` header, so an
        endpoint that ignores ``page`` ends after its first response. The
        page number travels in ``query_parameters``; python-gitlab warns when
        an iterator is combined with a ``page`` argument.
        """
        listing = self.call(
            ctx,
            f"list {manager.path} (page {page})",
            manager.list,
            iterator=True,
            get_next=False,
            per_page=per_page,
            query_parameters={**filters, "page": page},
        )
        return Page(items=list(listing), next_page=listing.next_page)

    def list_all(
        self,
        ctx: OperationContext,
        manager: Any,
        per_page: int = 100,
        key: Callable[[Any], Hashable] | None = None,
        **filters: Any,
    ) -> list[Any]:
        """Fetch every page of a list endpoint.

        Args:
            ctx: Operation context
            manager: python-gitlab manager
            per_page: Page size
            key: Item identity used to drop duplicates
            **filters: Query filters for the endpoint

        Returns:
            All items
        """
        items = collect_pages(
            lambda page: self.list_page(ctx, manager, page, per_page, **filters),
            key=key,
        )
        logger.info("gitlab_list_completed", path=manager.path, count=len(items))
        return items
