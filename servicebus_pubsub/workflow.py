"""
Ordered provisioning with guaranteed teardown.

A workflow runs named steps one after another, remembers every resource a
step creates together with the call that deletes it, and on exit deletes
whatever is still tracked in reverse creation order.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional, Tuple

from azure.core.exceptions import ResourceNotFoundError

from .models import ResourceHandle, StepRecord, StepStatus, WorkflowResult


Cleanup = Callable[[], None]


class ProvisioningWorkflow:
    """Sequential resource provisioning with a scoped cleanup block."""

    def __init__(self, name: str = "provisioning"):
        self.name = name
        self.result = WorkflowResult()
        self._tracked: List[Tuple[ResourceHandle, Cleanup]] = []
        self._torn_down = False
        self.logger = logging.getLogger(__name__)

    def __enter__(self) -> "ProvisioningWorkflow":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if exc_value is not None:
            self.logger.error(f"Workflow {self.name} failed: {exc_value}")
        self.teardown()
        return False

    @property
    def tracked(self) -> List[ResourceHandle]:
        return [handle for handle, _ in self._tracked]

    @contextmanager
    def step(self, name: str) -> Iterator[StepRecord]:
        """Record one step, marking it failed if its body raises."""
        record = StepRecord(name=name)
        self.result.steps.append(record)
        self.logger.info(f"[{self.name}] {name}...")
        try:
            yield record
        except Exception as e:
            record.status = StepStatus.FAILED
            record.error = str(e)
            record.finished_at = datetime.now(timezone.utc)
            raise
        record.status = StepStatus.COMPLETED
        record.finished_at = datetime.now(timezone.utc)

    def track(self, handle: ResourceHandle, cleanup: Cleanup) -> ResourceHandle:
        """Register a created resource and the call that deletes it."""
        self._tracked.append((handle, cleanup))
        self.logger.debug(f"Tracking {handle.kind.value} {handle.name}")
        return handle

    def release(self, handle: ResourceHandle) -> Optional[ResourceHandle]:
        """Stop tracking a resource that a later step already deleted."""
        for index, (tracked, _) in enumerate(self._tracked):
            if tracked.kind == handle.kind and tracked.name == handle.name:
                del self._tracked[index]
                self.result.cleaned_up.append(tracked)
                return tracked
        return None

    def teardown(self) -> WorkflowResult:
        """
        Delete every tracked resource, newest first.

        A resource that is already gone counts as cleaned up. Any other
        failure is logged and recorded; teardown carries on with the
        remaining resources and never raises.
        """
        if self._torn_down:
            return self.result
        self._torn_down = True

        if not self._tracked:
            self.logger.info("Did not create any resources in Azure. No clean up is necessary")
            return self.result

        while self._tracked:
            handle, cleanup = self._tracked.pop()
            label = f"{handle.kind.value} {handle.name}"
            try:
                self.logger.info(f"Deleting {label}")
                cleanup()
                self.logger.info(f"Deleted {label}")
                self.result.cleaned_up.append(handle)
            except ResourceNotFoundError:
                self.logger.info(f"{label} is already gone")
                self.result.cleaned_up.append(handle)
            except Exception as e:
                self.logger.error(f"Failed to delete {label}: {e}")
                self.result.teardown_errors.append(f"{label}: {e}")

        return self.result
