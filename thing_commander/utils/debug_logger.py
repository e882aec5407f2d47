"""
Debug logging utility for Thing Commander.
"""
import logging
import functools
import inspect
from typing import Callable

def get_command_logger(module_name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"thing_commander.commands.{module_name}")

def debug_log(func: Callable) -> Callable:
    """Decorator to add debug logging around a function call."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        module_name = func.__module__.split('.')[-1]
        logger = get_command_logger(module_name)

        if not logger.isEnabledFor(logging.DEBUG):
            return func(*args, **kwargs)

        # Log function call with arguments, secrets excluded
        func_args = inspect.signature(func).bind(*args, **kwargs)
        func_args.apply_defaults()
        filtered_args = {k: v for k, v in func_args.arguments.items()
                         if k not in ('self', 'password') and not k.startswith('_')}

        logger.debug(f"Executing {func.__name__} with args: {filtered_args}")
        try:
            result = func(*args, **kwargs)
            logger.debug(f"{func.__name__} completed successfully")
            return result
        except Exception as e:
            logger.debug(f"Error in {func.__name__}: {str(e)}")
            raise

    return wrapper

def debug_step(message: str) -> Callable:
    """Decorator to log debug steps within functions."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            module_name = func.__module__.split('.')[-1]
            get_command_logger(module_name).debug(message)
            return func(*args, **kwargs)
        return wrapper
    return decorator
