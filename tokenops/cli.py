from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Tuple

import click

from tokenops.config import Settings
from tokenops.exceptions import TokenOpsError


@contextmanager
def precondition_errors():
    """Turns precondition failures into a one-line CLI error with a non-zero exit."""
    try:
        yield
    except TokenOpsError as error:
        raise click.ClickException(str(error)) from error


def load_settings(
    params_filepath: Optional[Path] = None, local_networks: Optional[Tuple[str, ...]] = None
) -> Settings:
    settings = Settings.from_env(params_filepath=params_filepath)
    if local_networks:
        settings.local_networks = tuple(local_networks)
    return settings
