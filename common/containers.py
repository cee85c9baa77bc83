from dependency_injector import containers, providers

from common.file_watcher.dispatcher import ConsoleTransport, Dispatcher, InMemoryTransport
from common.file_watcher.manager import WatchdogWatcherRegistry
from common.file_watcher.metadata import WatchPolicy
from common.file_watcher.translator import ChangeEventTranslator
from common.listing import DEFAULT_MAX_CONCURRENCY, DirectoryListingService
from common.utils import LOG_FILE_NAME

DEFAULT_CONFIG = {
    "transport": "memory",
    "watch": {
        "depth": 1,
        "follow_symlinks": False,
        "ignore_dotfiles": True,
        "ignored_names": [LOG_FILE_NAME],
        "await_write_finish": True,
        "stability_threshold": 2.0,
    },
    "listing": {
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
        "minimum_duration": 0.2,
    },
}


def build_watch_policy(
    depth: int,
    follow_symlinks: bool,
    ignore_dotfiles: bool,
    ignored_names: list,
    await_write_finish: bool,
    stability_threshold: float,
) -> WatchPolicy:
    return WatchPolicy(
        depth=depth,
        follow_symlinks=follow_symlinks,
        ignore_dotfiles=ignore_dotfiles,
        ignored_names=tuple(ignored_names),
        await_write_finish=await_write_finish,
        stability_threshold=stability_threshold,
    )


class FileServiceContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    in_memory_transport = providers.Singleton(InMemoryTransport)

    console_transport = providers.Singleton(ConsoleTransport)

    transport = providers.Selector(
        config.transport,
        memory=in_memory_transport,
        console=console_transport,
    )

    dispatcher = providers.Singleton(Dispatcher, transport=transport)

    translator = providers.Singleton(ChangeEventTranslator)

    watch_policy = providers.Singleton(
        build_watch_policy,
        depth=config.watch.depth,
        follow_symlinks=config.watch.follow_symlinks,
        ignore_dotfiles=config.watch.ignore_dotfiles,
        ignored_names=config.watch.ignored_names,
        await_write_finish=config.watch.await_write_finish,
        stability_threshold=config.watch.stability_threshold,
    )

    listing_service = providers.Singleton(
        DirectoryListingService,
        max_concurrency=config.listing.max_concurrency,
    )

    watcher_registry = providers.Singleton(
        WatchdogWatcherRegistry,
        translator=translator,
        dispatcher=dispatcher,
        policy=watch_policy,
    )


container = FileServiceContainer()
container.config.from_dict(DEFAULT_CONFIG)
container.config.transport.from_env("FILEVIEW_TRANSPORT", default="memory")
container.config.watch.depth.from_env("FILEVIEW_WATCH_DEPTH", as_=int, default=1)
container.config.watch.stability_threshold.from_env(
    "FILEVIEW_STABILITY_THRESHOLD", as_=float, default=2.0
)
container.config.listing.minimum_duration.from_env(
    "FILEVIEW_MINIMUM_DURATION", as_=float, default=0.2
)
