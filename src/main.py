"""Main entry point for the terminal task list."""
from cli import CLI
from controller import Controller
from repository import TaskRepository
from settings import Settings, configure_logging
from storage import Storage
from theme import ThemeRegistry


def main():
    settings = Settings.from_env()
    configure_logging(settings)
    storage = Storage(settings.data_dir)
    controller = Controller(TaskRepository(storage), ThemeRegistry(storage))
    CLI(controller, settings).run()

if __name__ == "__main__":
    main()
