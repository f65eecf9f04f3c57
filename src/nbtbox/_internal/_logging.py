from collections.abc import MutableMapping
from logging import Logger
from logging import LoggerAdapter
from os import PathLike
from typing import Any

LoggerLike = Logger | LoggerAdapter


class DocumentLogger(LoggerAdapter):
    """A logger whose messages are prefixed with the document they concern.

    The document path is also attached to each record as `nbt_document` so handlers can filter on
    it without parsing the message.
    """

    def __init__(self, logger: LoggerLike, document: str | PathLike[str]) -> None:
        super().__init__(logger, {"nbt_document": str(document)})
        self.prefix = f"[{document}]"

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return f"{self.prefix} {msg}", kwargs
