"""Data source node - fetches external data into the execution's output map."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from .base import BaseNode

if TYPE_CHECKING:
    from ..engine.types import ExecutionContext, NodeResult
    from ..schemas.workflow import WorkflowNode


class DataSourceNode(BaseNode):
    """
    Fetch data through the data fetcher and merge it into `output_data`.

    Two data sources on concurrent branches writing the same key resolve
    last-write-wins; the merge itself is serialized by the context lock.
    """

    display_name = "Data Source"

    @property
    def kind(self) -> str:
        return "data_source"

    @property
    def description(self) -> str:
        return "Fetch external data (API, database or file)"

    async def execute(self, context: ExecutionContext, node: WorkflowNode) -> NodeResult:
        from ..engine.types import UnknownDescriptor

        data_source = self.require(node, getattr(node.data, "data_source", None), "data_source")

        started = time.perf_counter()
        try:
            fetched = await self.services(context).data_fetcher.fetch(data_source, context)
        finally:
            # Failed and timed-out fetches are timed too
            await context.record_response_time(node.id, (time.perf_counter() - started) * 1000)

        if not isinstance(fetched, UnknownDescriptor):
            await context.merge_output(fetched)

        return self.result({
            "fetchedData": fetched,
            "data": dict(context.output_data),
        })
