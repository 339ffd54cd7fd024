from kivymd.uix.screen import MDScreen
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.label import MDLabel
from kivymd.uix.textfield import MDTextField
from kivy.properties import BooleanProperty, StringProperty
from kivy.core.text import LabelBase
from kivy.metrics import dp
from kivymd.app import MDApp
from kivymd.uix.dialog import MDDialog
from kivymd.uix.button import MDFlatButton, MDRaisedButton
from kivymd.font_definitions import fonts_path
from pathlib import Path

from core import format_clock
from backend import settings as app_settings
from backend.programs import ProgramTemplate
from backend.session_controller import SessionView
from backend.workout_session import Session, is_actionable, template_at

# Only register the custom font if it exists
DIGITAL_FONT = "RobotoMonoDigital"
_font_path = Path(fonts_path) / "RobotoMono-Regular.ttf"
if _font_path.exists():
    LabelBase.register(name=DIGITAL_FONT, fn_regular=str(_font_path))
else:
    DIGITAL_FONT = "Roboto"


class LiveWorkoutScreen(MDScreen, SessionView):
    """Screen that runs the live session.

    It implements the controller's render hooks and forwards button presses
    back to the controller; no session state is kept here.
    """

    program_name = StringProperty("")
    active_text = StringProperty("00:00")
    total_text = StringProperty("00:00")
    rest_label = StringProperty("")
    rest_text = StringProperty("00:00")
    rest_visible = BooleanProperty(False)
    pause_label = StringProperty("Pause")
    weight_unit = StringProperty("kg")
    digital_font = StringProperty(DIGITAL_FONT)
    _dialog = None

    @property
    def controller(self):
        app = MDApp.get_running_app()
        return app.controller if app else None

    def on_pre_enter(self, *args):
        self.weight_unit = app_settings.get_value("weight_unit", "kg") or "kg"
        controller = self.controller
        if controller:
            controller.view = self
            controller.resume()
        return super().on_pre_enter(*args)

    def on_leave(self, *args):
        controller = self.controller
        if controller:
            controller.dispose()
            controller.view = SessionView()
        return super().on_leave(*args)

    # ------------------------------------------------------------------
    # Render hooks
    # ------------------------------------------------------------------
    def render_session(self, session: Session, program: ProgramTemplate) -> None:
        self.program_name = session.program_name
        lst = self.ids.get("exercise_list")
        if lst is None:
            return
        lst.clear_widgets()
        for ex_idx, progress in enumerate(session.exercises):
            template = template_at(program, ex_idx, progress.exercise_id)
            name = template.name if template else f"Exercise {ex_idx + 1}"
            reps = template.target_reps if template else ""
            header = MDLabel(
                text=f"{name}  ({progress.completed_count}/{len(progress.sets)})",
                bold=ex_idx == session.current_exercise_index,
                size_hint_y=None,
                height=dp(32),
            )
            lst.add_widget(header)
            for set_idx, record in enumerate(progress.sets):
                lst.add_widget(self._set_row(session, ex_idx, set_idx, record, reps))
        self._prefill_weight(session)

    def _set_row(self, session, ex_idx, set_idx, record, reps):
        row = MDBoxLayout(size_hint_y=None, height=dp(40), spacing=dp(8))
        if record.completed:
            detail = "done"
            if record.partial:
                detail = f"partial ({record.actual_reps if record.actual_reps is not None else '?'})"
            if record.weight is not None:
                detail += f" @ {record.weight:g} {self.weight_unit}"
        else:
            detail = f"{reps} reps"
        row.add_widget(MDLabel(text=f"Set {record.set_number}: {detail}"))
        if is_actionable(session, ex_idx, set_idx):
            row.add_widget(
                MDRaisedButton(
                    text="Done",
                    on_release=lambda *_, e=ex_idx, s=set_idx: self.complete_set(e, s),
                )
            )
            row.add_widget(
                MDFlatButton(
                    text="Partial",
                    on_release=lambda *_, e=ex_idx, s=set_idx: self.ask_partial(e, s),
                )
            )
        return row

    def _prefill_weight(self, session: Session) -> None:
        field = self.ids.get("weight_field")
        controller = self.controller
        if field is None or controller is None:
            return
        suggested = controller.suggest_weight(session.current_exercise_index)
        field.text = "" if suggested is None else f"{suggested:g}"

    def render_rest(self, remaining_ms, label: str) -> None:
        self.rest_visible = remaining_ms is not None
        self.rest_label = label or ""
        self.rest_text = format_clock(remaining_ms, round_up=True)

    def render_duration(self, active_ms: int, total_ms: int) -> None:
        self.active_text = format_clock(active_ms)
        self.total_text = format_clock(total_ms)

    def render_pause(self, label: str) -> None:
        self.pause_label = label

    def show_error(self, message: str) -> None:
        self._open_dialog(
            MDDialog(
                text=message,
                buttons=[MDFlatButton(text="OK", on_release=lambda *_: self._close_dialog())],
            )
        )

    def rest_complete(self) -> None:
        self.rest_visible = False

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    def _weight(self):
        field = self.ids.get("weight_field")
        text = field.text.strip() if field else ""
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None

    def complete_set(self, exercise_index: int, set_index: int) -> None:
        if self.controller:
            self.controller.complete_set(exercise_index, set_index, weight=self._weight())

    def ask_partial(self, exercise_index: int, set_index: int) -> None:
        reps_field = MDTextField(hint_text="Reps done", input_filter="int")

        def save(*_):
            text = reps_field.text.strip()
            actual = int(text) if text.isdigit() else None
            self._close_dialog()
            if self.controller:
                self.controller.complete_set(
                    exercise_index,
                    set_index,
                    weight=self._weight(),
                    partial=True,
                    actual_reps=actual,
                )

        self._open_dialog(
            MDDialog(
                title="Partial set",
                type="custom",
                content_cls=reps_field,
                buttons=[
                    MDFlatButton(text="Cancel", on_release=lambda *_: self._close_dialog()),
                    MDRaisedButton(text="Save", on_release=save),
                ],
            )
        )

    def leave_session(self) -> None:
        """Return to the program list. The session keeps running in the store."""
        if self.manager:
            self.manager.current = "programs"

    def toggle_pause(self) -> None:
        if self.controller:
            self.controller.toggle_pause()

    def skip_rest(self) -> None:
        if self.controller:
            self.controller.skip_rest()

    def extend_rest(self) -> None:
        if self.controller:
            self.controller.extend_rest()

    def confirm_reset(self) -> None:
        def reset(*_):
            self._close_dialog()
            if self.controller:
                self.controller.reset()

        self._open_dialog(
            MDDialog(
                text="Reset this session? All progress will be lost.",
                buttons=[
                    MDFlatButton(text="Cancel", on_release=lambda *_: self._close_dialog()),
                    MDRaisedButton(text="Reset", on_release=reset),
                ],
            )
        )

    def confirm_finish(self) -> None:
        def finish(*_):
            self._close_dialog()
            controller = self.controller
            if controller and controller.finish() is not None and self.manager:
                self.manager.current = "programs"

        self._open_dialog(
            MDDialog(
                text="Finish and save this session?",
                buttons=[
                    MDFlatButton(text="Cancel", on_release=lambda *_: self._close_dialog()),
                    MDRaisedButton(text="Finish", on_release=finish),
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
