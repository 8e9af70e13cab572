from .settings import DEFAULT_SETTINGS, RUN_LABEL
