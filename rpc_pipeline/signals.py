"""Django signals for RPC pipeline events.

Signals
-------
rpc_stage_reached
    Sent at the start of every pipeline stage, before the stage's hooks run.
rpc_request_finished
    Sent once a request has reached its final state.

Examples
--------
Count failed requests::

    from rpc_pipeline.signals import rpc_request_finished

    metrics = {"success": 0, "errors": 0}

    def on_finished(sender, state, duration, **kwargs):
        metrics["errors" if state.failed else "success"] += 1

    rpc_request_finished.connect(on_finished)

Notes
-----
Signals are sent synchronously in the task that processes the request. A
receiver of ``rpc_stage_reached`` that raises fails the request exactly like
a raising hook would. ``rpc_request_finished`` is sent with ``send_robust``
so its receivers can never affect the response.
"""

from __future__ import annotations

from django.dispatch import Signal

rpc_stage_reached = Signal()
"""Sent when the pipeline enters a stage.

Arguments:
    sender: The dispatcher class
    dispatcher: The dispatcher instance
    state (RequestState): The request being processed
    stage (HookStage): The stage being entered
"""

rpc_request_finished = Signal()
"""Sent when a request reaches its final state.

Arguments:
    sender: The dispatcher class
    dispatcher: The dispatcher instance
    state (RequestState): The finished request
    duration (float): Processing time in seconds
"""


__all__ = [
    "rpc_request_finished",
    "rpc_stage_reached",
]
