from __future__ import annotations

from collections.abc import Awaitable, Callable

from .domain.zkevm_bridge_operations_task import zkevm_bridge_operations_task as domain__zkevm_bridge_operations_task
from .domain.zksync_batch_status_task import zksync_batch_status_task as domain__zksync_batch_status_task

TaskFn = Callable[..., Awaitable[None]]

TASKS: dict[str, TaskFn] = {
    "domain__zkevm_bridge_operations_task": domain__zkevm_bridge_operations_task,
    "domain__zksync_batch_status_task": domain__zksync_batch_status_task,
}
