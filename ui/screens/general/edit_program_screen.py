"""Program builder screen and its exercise rows."""

from __future__ import annotations

from kivy.clock import Clock
from kivy.metrics import dp
from kivy.properties import BooleanProperty, NumericProperty, StringProperty
from kivy.uix.scrollview import ScrollView
from kivymd.app import MDApp
from kivymd.uix.boxlayout import MDBoxLayout
from kivymd.uix.button import MDFlatButton, MDIconButton, MDRaisedButton
from kivymd.uix.dialog import MDDialog
from kivymd.uix.label import MDLabel
from kivymd.uix.list import MDList, TwoLineListItem
from kivymd.uix.screen import MDScreen
from kivymd.uix.textfield import MDTextField

from backend import exercises
from backend.program_editor import ProgramEditor
from core import CATEGORY_LABELS, PROGRAM_CATEGORIES


class ProgramExerciseRow(MDBoxLayout):
    """One planned exercise with sets, reps, rest and reorder controls."""

    exercise_index = NumericProperty(0)

    def __init__(self, screen: "EditProgramScreen", index: int, exercise: dict, **kwargs):
        super().__init__(
            orientation="horizontal", size_hint_y=None, height=dp(56), spacing=dp(4), **kwargs
        )
        self.screen = screen
        self.exercise_index = index
        self.add_widget(MDLabel(text=exercise["name"], size_hint_x=0.34))
        for key, hint, flt in (
            ("sets", "Sets", "int"),
            ("reps", "Reps", None),
            ("rest", "Rest s", "int"),
        ):
            field = MDTextField(
                text=str(exercise[key]), hint_text=hint, input_filter=flt, size_hint_x=0.14
            )
            field.bind(text=lambda inst, value, k=key: self.on_value(k, value))
            self.add_widget(field)
        self.add_widget(MDIconButton(icon="arrow-up", on_release=lambda *_: self.move(-1)))
        self.add_widget(MDIconButton(icon="arrow-down", on_release=lambda *_: self.move(1)))
        self.add_widget(MDIconButton(icon="delete", on_release=lambda *_: self.remove_self()))

    def on_value(self, key: str, value: str) -> None:
        editor = self.screen.editor
        if editor is None or not value.strip():
            return
        try:
            editor.update_exercise(self.exercise_index, **{key: value})
        except (ValueError, IndexError):
            return
        self.screen.update_save_enabled()

    def move(self, step: int) -> None:
        editor = self.screen.editor
        target = self.exercise_index + step
        if editor is None or not 0 <= target < len(editor.exercises):
            return
        editor.move_exercise(self.exercise_index, target)
        self.screen.refresh_exercises()

    def remove_self(self) -> None:
        if self.screen.editor is None:
            return
        self.screen.editor.remove_exercise(self.exercise_index)
        self.screen.refresh_exercises()


class EditProgramScreen(MDScreen):
    """Create a program or change an existing one.

    Call :meth:`edit` before switching to the screen.
    """

    title = StringProperty("New program")
    category_label = StringProperty("")
    save_enabled = BooleanProperty(False)
    editor: ProgramEditor | None = None
    _dialog = None
    _search_event = None

    def edit(self, program_id: str | None = None) -> None:
        app = MDApp.get_running_app()
        self.editor = ProgramEditor(app.catalog, program_id)
        self.title = "Edit program" if program_id else "New program"

    def on_pre_enter(self, *args):
        if self.editor is None:
            self.edit()
        name_field = self.ids.get("name_field")
        if name_field is not None:
            name_field.text = self.editor.display_name
        self._update_category()
        self.refresh_exercises()
        return super().on_pre_enter(*args)

    def update_name(self, name: str) -> None:
        if self.editor:
            self.editor.display_name = name
            self.update_save_enabled()

    def cycle_category(self) -> None:
        if not self.editor:
            return
        idx = PROGRAM_CATEGORIES.index(self.editor.category)
        self.editor.category = PROGRAM_CATEGORIES[(idx + 1) % len(PROGRAM_CATEGORIES)]
        self._update_category()
        self.update_save_enabled()

    def _update_category(self) -> None:
        category = self.editor.category if self.editor else PROGRAM_CATEGORIES[0]
        self.category_label = CATEGORY_LABELS.get(category, category)

    def refresh_exercises(self) -> None:
        box = self.ids.get("exercise_list")
        if box is None or self.editor is None:
            return
        box.clear_widgets()
        for idx, ex in enumerate(self.editor.exercises):
            box.add_widget(ProgramExerciseRow(self, idx, ex))
        self.update_save_enabled()

    def update_save_enabled(self) -> None:
        self.save_enabled = bool(self.editor and not self.editor.validate())

    def open_library(self) -> None:
        content = MDBoxLayout(orientation="vertical", size_hint_y=None, height=dp(360))
        search = MDTextField(hint_text="Search exercises", size_hint_y=None, height=dp(48))
        results = MDList()
        scroll = ScrollView()
        scroll.add_widget(results)
        content.add_widget(search)
        content.add_widget(scroll)

        def populate(*_):
            self._search_event = None
            results.clear_widgets()
            for ex in exercises.get_all_exercises(search=search.text):
                detail = ", ".join(ex.muscles)
                if ex.equipment:
                    detail = f"{detail} - {ex.equipment}" if detail else ex.equipment
                item = TwoLineListItem(text=ex.name, secondary_text=detail)
                item.bind(on_release=lambda inst, e=ex: self.select_exercise(e))
                results.add_widget(item)

        def on_search(*_):
            if self._search_event:
                self._search_event.cancel()
            self._search_event = Clock.schedule_once(populate, 0.2)

        search.bind(text=on_search)
        populate()
        self._open_dialog(
            MDDialog(
                title="Exercise library",
                type="custom",
                content_cls=content,
                buttons=[MDFlatButton(text="Close", on_release=lambda *_: self._close_dialog())],
            )
        )

    def select_exercise(self, library_exercise) -> None:
        if self.editor is None:
            return
        self.editor.add_from_library(library_exercise)
        self._close_dialog()
        self.refresh_exercises()

    def save_program(self) -> None:
        if not self.editor:
            return
        errors = self.editor.validate()
        if errors:
            self._show_message("Error", errors[0])
            return
        try:
            self.editor.save()
        except ValueError as exc:
            self._show_message("Error", str(exc))
            return
        self.editor = None
        if self.manager:
            self.manager.current = "programs"

    def go_back(self) -> None:
        if self.editor and self.editor.is_modified():

            def discard(*_):
                self._close_dialog()
                self.editor = None
                if self.manager:
                    self.manager.current = "programs"

            self._open_dialog(
                MDDialog(
                    title="Discard Changes?",
                    text="You have unsaved changes. Discard them?",
                    buttons=[
                        MDFlatButton(text="Cancel", on_release=lambda *_: self._close_dialog()),
                        MDRaisedButton(text="Discard", on_release=discard),
                    ],
                )
            )
            return
        self.editor = None
        if self.manager:
            self.manager.current = "programs"

    def _show_message(self, title: str, text: str) -> None:
        self._open_dialog(
            MDDialog(
                title=title,
                text=text,
                buttons=[MDRaisedButton(text="OK", on_release=lambda *_: self._close_dialog())],
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
