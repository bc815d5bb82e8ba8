from .settings import Config, SiteConfig

__all__ = ["Config", "SiteConfig"]
