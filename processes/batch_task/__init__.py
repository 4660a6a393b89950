"""Batch task wrapper around the sparrow optimizer.

One wrapper process runs per task index of a batch job array. It resolves the
task's input/output pair from the index, resolves optimizer parameters from
environment overrides, runs the optimizer binary, and copies its single JSON
output to the task's result path.

CLI usage is available via `python -m processes.batch_task`.
"""
