import functools
from concurrent.futures import ThreadPoolExecutor
from asgiref.sync import sync_to_async
from django.conf import settings
from reposerve.apkrepo.config import load_config


def get_config():
    """
    Returns the immutable daemon configuration
    """
    return load_config(settings.REPOSERVE_CONFIG)


def get_repository_controller(logger=None):
    """
    Returns an instance to the repository controller

    logger - (optional) overrides the default logger
    """
    from reposerve.apkrepo.repository import Repository
    return Repository(get_config(), logger=logger)


def get_webhook_dispatcher(logger=None):
    """
    Returns a dispatcher over the configured webhooks
    """
    from reposerve.apkrepo.webhooks import WebhookDispatcher
    config = get_config()
    return WebhookDispatcher(config.webhooks, timeout=config.timeout, logger=logger)


@functools.lru_cache(maxsize=None)
def get_worker_pool(workers):
    """
    Bounded pool running filesystem and external process work off the event loop
    """
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix='reposerve')


async def run_blocking(func, *args, **kwargs):
    """
    Runs a blocking callable on the worker pool and awaits its result
    """
    pool = get_worker_pool(get_config().workers)
    return await sync_to_async(func, thread_sensitive=False, executor=pool)(*args, **kwargs)
