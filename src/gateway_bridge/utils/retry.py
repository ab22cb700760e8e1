from typing import TypeVar, Callable, Any, Optional
import asyncio
import random
import functools
from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

def async_retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple = (Exception,),
    giveup: tuple = ()
) -> Callable:
    """
    Decorator for async functions to retry with exponential backoff.

    Args:
        max_retries (int): Maximum number of retry attempts
        base_delay (float): Initial delay between retries in seconds, 0 retries immediately
        max_delay (float): Maximum delay between retries in seconds
        exponential_base (float): Base for exponential backoff calculation
        jitter (bool): Whether to add random jitter to delay
        exceptions (tuple): Exception types to catch and retry on
        giveup (tuple): Exception types that are raised at once, even when
            they are also listed in ``exceptions``

    Returns:
        Callable: Decorated async function with retry logic
    """
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            retry_count = 0
            last_exception: Optional[Exception] = None

            while retry_count <= max_retries:
                try:
                    if retry_count > 0:
                        logger.info(f"Retry attempt {retry_count} for {func.__name__}")
                    return await func(*args, **kwargs)

                except exceptions as e:
                    if giveup and isinstance(e, giveup):
                        raise

                    retry_count += 1
                    last_exception = e

                    if retry_count > max_retries:
                        logger.warning(
                            f"Max retries ({max_retries}) exceeded for {func.__name__}. "
                            f"Last error: {str(e)}"
                        )
                        raise

                    delay = min(
                        base_delay * (exponential_base ** (retry_count - 1)),
                        max_delay
                    )

                    # Add jitter if enabled (±25% of delay)
                    if jitter and delay > 0:
                        jitter_range = delay * 0.25
                        delay += random.uniform(-jitter_range, jitter_range)

                    delay = max(0.0, min(delay, max_delay))

                    logger.warning(
                        f"Attempt {retry_count} failed for {func.__name__}. "
                        f"Error: {str(e)}. Retrying in {delay:.2f}s"
                    )

                    if delay > 0:
                        await asyncio.sleep(delay)

            # This should never be reached due to the raise in the loop
            raise last_exception or Exception("Unexpected retry failure")

        return wrapper

    return decorator
