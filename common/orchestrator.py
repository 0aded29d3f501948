# common/orchestrator.py
# -*- coding: utf-8 -*-
"""
Centralized orchestrator for managing and executing sequences of tasks.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TextIO

from common.core_utils import print_stage_header


class Orchestrator:
    """Runs a series of named tasks once, in order, each under its own banner."""

    def __init__(
        self,
        app_settings: Any,
        orchestrator_logger: Optional[logging.Logger] = None,
        stream: Optional[TextIO] = None,
    ):
        """
        Initializes the Orchestrator.

        Args:
            app_settings: The application settings object.
            orchestrator_logger: An optional logger instance.
            stream: Where stage banners are written (standard error by default).
        """
        self.app_settings = app_settings
        self.logger = orchestrator_logger or logging.getLogger(__name__)
        self.stream = stream
        self.tasks: List[Dict[str, Any]] = []

    def add_task(
        self,
        name: str,
        func: Callable,
        args: Optional[List[Any]] = None,
        kwargs: Optional[Dict[str, Any]] = None,
    ):
        """
        Adds a task to the execution list.

        Args:
            name: Banner title for the task.
            func: The function to execute for this task.
            args: A list of positional arguments to pass to the function.
            kwargs: A dictionary of keyword arguments to pass to the function.
        """
        self.tasks.append({
            "name": name,
            "func": func,
            "args": args or [],
            "kwargs": kwargs or {},
        })
        self.logger.debug(f"Task '{name}' added to the queue.")

    def run(self) -> None:
        """
        Executes all added tasks in sequence.

        Raises:
            Exception: Whatever a task raised. Later tasks are not run and
                earlier tasks' side effects are left in place.
        """
        delay = getattr(self.app_settings, "stage_delay", 0.0) or 0.0
        for i, task in enumerate(self.tasks):
            task_name = task["name"]
            print_stage_header(task_name, delay=delay, stream=self.stream)
            self.logger.debug(f"--- Stage {i + 1}: Running task '{task_name}' ---")

            try:
                task["func"](*task["args"], **task["kwargs"])
            except Exception as e:
                self.logger.debug(f"Task '{task_name}' failed: {e}", exc_info=True)
                raise
