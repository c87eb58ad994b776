"""Result paginators and resource iterators."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import jmespath

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from aws_sdk_common_python.client import AwsClient
    from aws_sdk_common_python.config import PaginatorConfig

logger = logging.getLogger(__name__)


class ResultPaginator:
    """Lazily iterate over the result pages of an operation.

    Each page is fetched by executing the operation with the caller's
    arguments, plus the output tokens of the previous page mapped onto the
    input token parameters. Nothing is fetched until the first page is
    requested. Iteration stops after the first page without a next token.

    A paginator is single-use: once exhausted it stays exhausted.
    """

    def __init__(
        self,
        client: AwsClient,
        operation: str,
        args: Mapping[str, Any],
        config: PaginatorConfig,
    ) -> None:
        self._client = client
        self._operation = operation
        self._args = dict(args)
        self._config = config
        self._next_token: dict[str, Any] | None = None
        self._exhausted = False
        self._request_count = 0

    @property
    def operation(self) -> str:
        return self._operation

    @property
    def config(self) -> PaginatorConfig:
        return self._config

    @property
    def next_token(self) -> dict[str, Any] | None:
        """Input token parameters of the next request, None before the first and after the last page."""
        return dict(self._next_token) if self._next_token else None

    @property
    def request_count(self) -> int:
        return self._request_count

    @property
    def is_exhausted(self) -> bool:
        return self._exhausted

    def __iter__(self) -> ResultPaginator:
        return self

    def __next__(self) -> Any:
        if self._exhausted:
            raise StopIteration

        args = self._build_args()
        command = self._client.get_command(self._operation, args)
        result = self._client.execute(command)
        self._request_count += 1
        logger.debug(
            "Fetched page %d of %s", self._request_count, self._operation
        )

        next_token = self._determine_next_token(result)
        if next_token is None:
            self._exhausted = True
        elif next_token == self._next_token:
            logger.warning(
                "Pagination token of %s did not change, stopping: %s",
                self._operation,
                next_token,
            )
            self._exhausted = True
        else:
            self._next_token = next_token

        if self._exhausted:
            self._next_token = None
        return result

    def _build_args(self) -> dict[str, Any]:
        args = dict(self._args)
        if self._config.limit_key and self._config.page_size is not None:
            args[self._config.limit_key] = self._config.page_size
        if self._next_token:
            args.update(self._next_token)
        return args

    def _determine_next_token(self, result: Any) -> dict[str, Any] | None:
        """Map the output tokens of a page onto the input token parameters."""
        if not self._config.output_token or not self._config.input_token:
            return None

        if self._config.more_results and not jmespath.search(
            self._config.more_results, result
        ):
            return None

        values = [
            jmespath.search(expression, result)
            for expression in self._config.output_token
        ]
        if not any(values):
            return None

        return {
            name: value
            for name, value in zip(self._config.input_token, values, strict=False)
            if value
        }

    def search(self, expression: str) -> Iterator[Any]:
        """Yield the value of a jmespath expression for each remaining page.

        List values are flattened into their items.
        """
        compiled = jmespath.compile(expression)
        for page in self:
            value = compiled.search(page)
            if isinstance(value, list):
                yield from value
            elif value is not None:
                yield value


class ResourceIterator:
    """Iterate over the individual resources of all result pages.

    Resources are read from the result_key expressions of each page, in page
    order. Stops after config.limit resources when a limit is set.
    Non-restartable: iterating again continues where the last iteration left off.
    """

    def __init__(self, paginator: ResultPaginator, config: PaginatorConfig) -> None:
        self._paginator = paginator
        self._config = config
        self._yielded = 0
        self._items = self._iterate()

    @property
    def request_count(self) -> int:
        return self._paginator.request_count

    @property
    def paginator(self) -> ResultPaginator:
        return self._paginator

    def __iter__(self) -> ResourceIterator:
        return self

    def __next__(self) -> Any:
        return next(self._items)

    def _iterate(self) -> Iterator[Any]:
        if self._limit_reached():
            return
        for page in self._paginator:
            for key in self._config.result_key:
                value = jmespath.search(key, page)
                if value is None:
                    continue
                for item in value if isinstance(value, list) else [value]:
                    yield item
                    self._yielded += 1
                    if self._limit_reached():
                        return

    def _limit_reached(self) -> bool:
        return self._config.limit is not None and self._yielded >= self._config.limit

    def to_list(self) -> list[Any]:
        return list(self)
