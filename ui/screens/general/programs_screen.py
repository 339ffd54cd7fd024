from datetime import datetime

from kivymd.uix.screen import MDScreen
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.label import MDLabel
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.app import MDApp
from kivy.metrics import dp
from kivy.properties import BooleanProperty, StringProperty

from core import CATEGORY_LABELS
from backend.programs import ProgramTemplate


class ProgramsScreen(MDScreen):
    """List the program catalog and start sessions from it.

    A stored session is offered for recovery the first time the screen is
    entered after the app starts.
    """

    history_text = StringProperty("")
    session_active = BooleanProperty(False)
    _dialog = None

    def on_pre_enter(self, *args):
        self.populate()
        return super().on_pre_enter(*args)

    def on_enter(self, *args):
        app = MDApp.get_running_app()
        session = app.controller.recovery_candidate() if app and app.controller else None
        if session is not None:
            self._show_recovery_dialog(session)
        return super().on_enter(*args)

    def populate(self) -> None:
        """Fill the list with every program in the catalog."""
        app = MDApp.get_running_app()
        lst = self.ids.get("program_list")
        if not app or lst is None:
            return
        self.session_active = app.controller.store.has_session()
        lst.clear_widgets()
        for program in app.catalog.list_programs():
            lst.add_widget(self._program_row(program))
        history = app.sink.history(limit=1)
        if history:
            last = history[0]
            self.history_text = (
                f"Last training: {last['program_name']} on {last['date']}"
                f" ({last['duration_minutes']} min)"
            )
        else:
            self.history_text = "No trainings recorded yet"

    def _program_row(self, program: ProgramTemplate):
        row = MDBoxLayout(size_hint_y=None, height=dp(48), spacing=dp(6))
        category = CATEGORY_LABELS.get(program.category, program.category)
        row.add_widget(
            MDLabel(text=f"{program.display_name}\n[size=12sp]{category} - {len(program.exercises)} exercises[/size]", markup=True)
        )
        row.add_widget(
            MDRaisedButton(text="Start", on_release=lambda *_, pid=program.id: self.start(pid))
        )
        row.add_widget(
            MDFlatButton(text="Edit", on_release=lambda *_, pid=program.id: self.edit(pid))
        )
        row.add_widget(
            MDFlatButton(text="Clone", on_release=lambda *_, pid=program.id: self.clone(pid))
        )
        row.add_widget(
            MDFlatButton(
                text="Delete", on_release=lambda *_, p=program: self.confirm_delete(p)
            )
        )
        return row

    def start(self, program_id: str) -> None:
        app = MDApp.get_running_app()
        if app.controller.store.has_session():
            self._show_replace_dialog(program_id)
            return
        self._start(program_id)

    def _start(self, program_id: str) -> None:
        app = MDApp.get_running_app()
        if app.controller.start(program_id) and self.manager:
            self.manager.current = "live_workout"

    def continue_session(self) -> None:
        if self.manager and self.session_active:
            self.manager.current = "live_workout"

    def edit(self, program_id: str | None = None) -> None:
        """Open the program builder, empty when ``program_id`` is ``None``."""
        if not self.manager:
            return
        self.manager.get_screen("edit_program").edit(program_id)
        self.manager.current = "edit_program"

    def clone(self, program_id: str) -> None:
        MDApp.get_running_app().catalog.clone_program(program_id)
        self.populate()

    def confirm_delete(self, program: ProgramTemplate) -> None:
        def delete(*_):
            self._close_dialog()
            MDApp.get_running_app().controller.delete_program(program.id)
            self.populate()

        self._open_dialog(
            MDDialog(
                text=f"Delete '{program.display_name}'?",
                buttons=[
                    MDFlatButton(text="Cancel", on_release=lambda *_: self._close_dialog()),
                    MDRaisedButton(text="Delete", on_release=delete),
                ],
            )
        )

    def _show_replace_dialog(self, program_id: str) -> None:
        def replace(*_):
            self._close_dialog()
            self._start(program_id)

        self._open_dialog(
            MDDialog(
                text="A session is already in progress. Start a new one?",
                buttons=[
                    MDFlatButton(text="Cancel", on_release=lambda *_: self._close_dialog()),
                    MDRaisedButton(text="Start new", on_release=replace),
                ],
            )
        )

    def _show_recovery_dialog(self, session) -> None:
        app = MDApp.get_running_app()
        started = datetime.fromtimestamp(session.started_at).strftime("%H:%M")

        def recover(*_):
            self._close_dialog()
            if self.manager:
                self.manager.current = "live_workout"

        def discard(*_):
            self._close_dialog()
            app.controller.discard()
            self.populate()

        self._open_dialog(
            MDDialog(
                text=f"Resume the session started at {started}?",
                buttons=[
                    MDFlatButton(text="Discard", on_release=discard),
                    MDRaisedButton(text="Resume", on_release=recover),
                ],
            )
        )

    def _open_dialog(self, dialog) -> None:
        self._close_dialog()
        self._dialog = dialog
        dialog.open()

    def _close_dialog(self) -> None:
        if self._dialog:
            self._dialog.dismiss()
            self._dialog = None
