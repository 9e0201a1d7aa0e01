"""Run the Mithoo UI with settings from the environment."""

from . import Mithoo
from .config import Settings, configure_logging


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = Mithoo(settings=settings, title="Mithoo")
    app.run(debug=False)


if __name__ == "__main__":
    main()
