import inspect
from functools import wraps

from pulse import api


def capture_errors(func):
    """
    A decorator that reports exceptions raised by the wrapped function.

    Args:
      func (callable): The function or coroutine function to be wrapped.

    Returns:
      callable: The wrapped function.

    Any ``Exception`` raised by the wrapped function is captured and then
    re-raised unchanged, so callers see the same result as without the
    decorator. ``KeyboardInterrupt``, ``SystemExit`` and task cancellation are
    not reported.

    Example:
      @capture_errors
      async def sync_accounts():
          ...
    """

    if inspect.iscoroutinefunction(func):

        @wraps(func)
        async def async_inner(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                api.capture_error(e)
                raise

        return async_inner

    @wraps(func)
    def inner(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            api.capture_error(e)
            raise

    return inner
