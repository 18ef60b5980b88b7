from eggtracker.config.settings import settings

__all__ = ["settings"]
