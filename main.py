from kivymd.app import MDApp
from kivy.lang import Builder
from pathlib import Path
import logging

from core import DEFAULT_DB_PATH
from backend.database import init_database
from backend.programs import ProgramCatalog
from backend.session_controller import SessionController
from backend.session_store import SessionStore
from backend.trainings import TrainingSink
from backend.weight_memory import WeightMemory
from assets.sounds import SoundSystem

# Registers the screen classes referenced from main.kv
from ui.screens import (  # noqa: F401
    EditProgramScreen,
    LiveWorkoutScreen,
    ProgramsScreen,
    SettingsScreen,
)


class WorkoutApp(MDApp):
    catalog: ProgramCatalog | None = None
    sink: TrainingSink | None = None
    controller: SessionController | None = None
    sound: SoundSystem | None = None

    def build(self):
        db_path = init_database(DEFAULT_DB_PATH)
        self.catalog = ProgramCatalog(db_path)
        self.catalog.ensure_default_programs()
        self.sink = TrainingSink(db_path)
        self.sound = SoundSystem()
        self.controller = SessionController(
            SessionStore(),
            self.catalog,
            WeightMemory(db_path),
            self.sink,
            cue=self.sound.rest_complete,
        )
        logging.info("Using database %s", db_path)
        return Builder.load_file(str(Path(__file__).with_name("main.kv")))

    def on_stop(self):
        if self.controller:
            self.controller.dispose()


if __name__ == "__main__":
    WorkoutApp().run()
