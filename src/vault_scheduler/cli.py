"""
Vault Scheduler - Interactive CLI Interface
Numbered rich menus over SchedulerApp: weekly grid, monthly tasks, goals,
backlog and settings. The current view is re-rendered after every action.
"""
from datetime import date
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from loguru import logger
from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from vault_scheduler import dates, forms
from vault_scheduler.app import SchedulerApp
from vault_scheduler.config import DisplayConfig
from vault_scheduler.managers.schedule import matches_type_group
from vault_scheduler.models import (
    DAY_NAMES,
    MONTH_NAMES,
    Direction,
    ItemType,
    SchedulerError,
    SchedulerItem,
)
from vault_scheduler.render import render_backlog, render_goals, render_item, render_week, render_year
from vault_scheduler.render.monthly import TYPE_GROUPS

MenuOption = Tuple[str, str, Callable[[], None]]
DAY_CHOICES = [name[:3].lower() for name in DAY_NAMES]
MONTHLY_TYPES = [ItemType.TASK, ItemType.DEADLINE, ItemType.GOAL, ItemType.REGULAR]


def resolve_item(items: Iterable[SchedulerItem], raw: str) -> Optional[SchedulerItem]:
    """Match an id typed by the user: exact id first, then a unique id suffix."""
    raw = raw.strip().lstrip("#")
    if not raw:
        return None
    items = list(items)
    exact = next((i for i in items if i.id == raw), None)
    if exact:
        return exact
    matches = {i.id: i for i in items if i.id.endswith(raw)}
    return next(iter(matches.values())) if len(matches) == 1 else None


class SchedulerCLI:
    """Interactive command-line interface for the vault scheduler."""

    def __init__(self, app: SchedulerApp, display: Optional[DisplayConfig] = None,
                 console: Optional[Console] = None):
        self.app = app
        self.display = display or DisplayConfig()
        self.console = console or Console()
        self.running = False

    # ---- loop plumbing ----

    def start(self) -> None:
        """Start the interactive CLI loop."""
        self.console.print("\n[bold green]📅 Vault Scheduler[/bold green]")
        self.console.print(f"[dim]Data: {self.app.data_manager.data_dir}[/dim]")
        self.app.ensure_data_loaded()

        self.running = True
        try:
            self._menu("Main Menu", [
                ("1", "Weekly schedule", self.weekly_menu),
                ("2", "Monthly tasks", self.monthly_menu),
                ("3", "General goals", self.goals_menu),
                ("4", "Backlog", self.backlog_menu),
                ("5", "Settings", self.settings_menu),
            ], back_label="Exit")
        except (KeyboardInterrupt, EOFError):
            self.console.print("\n[yellow]Interrupted. Shutting down...[/yellow]")
        finally:
            self.running = False
            logger.info("Scheduler CLI closed")

    def _menu(self, title: str, options: Sequence[MenuOption], render: Optional[Callable[[], None]] = None,
              back_label: str = "Back") -> None:
        handlers = {key: handler for key, _, handler in options}
        while True:
            if render:
                render()
            self.console.print(f"\n[bold cyan]--- {title} ---[/bold cyan]")
            for key, label, _ in options:
                self.console.print(f"[{key}] {label}")
            self.console.print(f"[0] {back_label}")

            choice = Prompt.ask("Choose an action", choices=[key for key, _, _ in options] + ["0"])
            if choice == "0":
                return
            self._run(handlers[choice])

    def _run(self, action: Callable[[], None]) -> None:
        try:
            action()
        except SchedulerError as e:
            logger.warning(f"Action failed: {e}")
            self.console.print(f"[red]{e}[/red]")

    def _say(self, message: str) -> None:
        if self.app.settings.show_notifications:
            self.console.print(f"[green]{message}[/green]")

    def _confirm(self, question: str) -> bool:
        return Confirm.ask(question, default=False)

    def _ask_day(self) -> int:
        return DAY_CHOICES.index(Prompt.ask("Day", choices=DAY_CHOICES))

    def _ask_hour(self, label: str = "Hour (0-23)", default: Optional[int] = None) -> int:
        hour = IntPrompt.ask(label) if default is None else IntPrompt.ask(label, default=default)
        if not 0 <= hour <= 23:
            raise SchedulerError("Hour must be between 0 and 23")
        return hour

    def _ask_month(self) -> int:
        month = IntPrompt.ask("Month (1-12)", default=date.today().month)
        if not 1 <= month <= 12:
            raise SchedulerError("Month must be between 1 and 12")
        return month - 1

    def _ask_direction(self) -> Direction:
        return Direction(Prompt.ask("Direction", choices=[d.value for d in Direction]))

    def _pick_item(self, items: Iterable[SchedulerItem]) -> SchedulerItem:
        item = resolve_item(items, Prompt.ask("Item id (or its unique ending)"))
        if item is None:
            raise SchedulerError("No matching item")
        return item

    def _edit_item(self, item: SchedulerItem) -> None:
        updates = forms.prompt_item_updates(self.console, item, self.app.settings.categories)
        self.app.update_item(item.id, updates)
        self._say(f"Updated '{updates['name']}'")

    def _delete_item(self, item: SchedulerItem) -> None:
        if self._confirm(f"Delete '{item.name}'?"):
            self.app.remove_item(item.id)
            self._say(f"Deleted '{item.name}'")

    def _toggle_item(self, item: SchedulerItem) -> None:
        state = self.app.toggle_task_complete(item.id)
        if state is None:
            raise SchedulerError(f"'{item.name}' is not a task")
        self._say(f"'{item.name}' marked {'done' if state else 'not done'}")

    # ---- weekly ----

    def week_items(self) -> List[SchedulerItem]:
        week = self.app.get_current_week_data()
        return [item for _, _, items in week.iter_cells() for item in items] if week else []

    def render_week(self) -> None:
        week = self.app.get_current_week_data()
        if week is None:
            return
        self.console.print(render_week(
            week, self.app.settings, self.app.current_week, self.app.current_year,
            today=self.app.today, show_ids=self.display.show_item_ids,
            max_items_per_cell=self.display.max_items_per_cell,
        ))

    def weekly_menu(self) -> None:
        self._menu("Weekly Schedule", [
            ("1", "Previous week", lambda: self.app.change_week(-1)),
            ("2", "Next week", lambda: self.app.change_week(1)),
            ("3", "Current week", self.app.go_to_current_week),
            ("4", "Go to date", self.go_to_date),
            ("5", "Add item", self.add_week_item),
            ("6", "Edit item", lambda: self._edit_item(self._pick_item(self.week_items()))),
            ("7", "Delete item", lambda: self._delete_item(self._pick_item(self.week_items()))),
            ("8", "Toggle task done", lambda: self._toggle_item(self._pick_item(self.week_items()))),
            ("9", "Populate standard tasks", self.populate_standard_tasks),
            ("10", "Clear non-standard tasks", self.clear_non_standard_tasks),
            ("11", "Clear ALL tasks", self.clear_all_tasks),
        ], render=self.render_week)

    def go_to_date(self) -> None:
        raw = Prompt.ask("Date (YYYY-MM-DD)", default=dates.to_iso_date_string(self.app.today or date.today()))
        self.app.go_to_date(forms.parse_deadline_date(raw))

    def add_week_item(self) -> None:
        day = self._ask_day()
        hour = self._ask_hour()
        item = forms.prompt_new_item(self.console, self.app.settings.categories)
        added = self.app.add_item_to_schedule(day, hour, item)
        if added:
            self._say(f"Added '{added.name}' to {DAY_NAMES[day]} {hour:02d}:00")

    def populate_standard_tasks(self) -> None:
        added = self.app.populate_standard_tasks()
        self.console.print(f"[dim]{added} standard tasks added[/dim]")

    def clear_non_standard_tasks(self) -> None:
        if self._confirm("Clear all non-standard tasks from this week?"):
            self.app.clear_non_standard_tasks()

    def clear_all_tasks(self) -> None:
        if self._confirm("Clear ALL tasks for current week including standard/recurring tasks? This cannot be undone!"):
            self.app.clear_all_tasks()

    # ---- monthly ----

    def month_items(self) -> List[SchedulerItem]:
        year_data = self.app.current_year_data
        if year_data is None:
            return []
        return [item for month in sorted(year_data.monthly_tasks) for item in year_data.monthly_tasks[month]]

    def render_year(self) -> None:
        year_data = self.app.current_year_data
        if year_data is not None:
            self.console.print(render_year(year_data, self.app.settings, show_ids=self.display.show_item_ids))

    def monthly_menu(self) -> None:
        self._menu("Monthly Tasks", [
            ("1", "Previous year", lambda: self.app.change_year(-1)),
            ("2", "Next year", lambda: self.app.change_year(1)),
            ("3", "Current year", self.app.go_to_current_year),
            ("4", "Add task", self.add_monthly_task),
            ("5", "Edit item", lambda: self._edit_item(self._pick_item(self.month_items()))),
            ("6", "Delete item", lambda: self._delete_item(self._pick_item(self.month_items()))),
            ("7", "Toggle task done", lambda: self._toggle_item(self._pick_item(self.month_items()))),
            ("8", "Reorder item", self.reorder_monthly_task),
            ("9", "Clear month", self.clear_month),
        ], render=self.render_year)

    def add_monthly_task(self) -> None:
        month = self._ask_month()
        item = forms.prompt_new_item(self.console, self.app.settings.categories, allowed_types=MONTHLY_TYPES,
                                     month=month, year=self.app.current_year)
        added = self.app.add_monthly_task(month, item)
        if added:
            self._say(f"Added '{added.name}' to {MONTH_NAMES[month]}")

    def reorder_monthly_task(self) -> None:
        month = self._ask_month()
        item = self._pick_item(self.app.get_monthly_tasks(month))
        task_type = next(key for key, _ in TYPE_GROUPS if matches_type_group(item, key))
        if not self.app.reorder_monthly_task(item.id, month, task_type, self._ask_direction()):
            self.console.print("[yellow]Already at the edge of its group.[/yellow]")

    def clear_month(self) -> None:
        month = self._ask_month()
        if self._confirm(f"Clear all tasks in {MONTH_NAMES[month]}?"):
            self.app.clear_month_tasks(month)

    # ---- goals ----

    def render_goals(self) -> None:
        self.console.print(render_goals(self.app.get_general_goals(), self.app.settings,
                                        show_ids=self.display.show_item_ids))

    def goals_menu(self) -> None:
        self._menu("General Goals", [
            ("1", "Add goal", self.add_goal),
            ("2", "Edit goal", lambda: self._edit_item(self._pick_item(self.app.get_general_goals()))),
            ("3", "Delete goal", lambda: self._delete_item(self._pick_item(self.app.get_general_goals()))),
            ("4", "Reorder goal", self.reorder_goal),
            ("5", "Clear goals in a category", self.clear_category_goals),
            ("6", "Clear all goals", self.clear_goals),
        ], render=self.render_goals)

    def add_goal(self) -> None:
        item = forms.prompt_new_item(self.console, self.app.settings.categories, allowed_types=[ItemType.GOAL])
        self._say(f"Added goal '{self.app.add_general_goal(item).name}'")

    def reorder_goal(self) -> None:
        item = self._pick_item(self.app.get_general_goals())
        if not self.app.reorder_general_goal(item.id, self._ask_direction()):
            self.console.print("[yellow]Already at the edge of its category.[/yellow]")

    def clear_category_goals(self) -> None:
        category_id = Prompt.ask("Category", choices=[c.id for c in self.app.settings.categories])
        if self._confirm(f"Clear all goals in '{category_id}'?"):
            self.app.clear_category_goals(category_id)

    def clear_goals(self) -> None:
        if self._confirm("Clear ALL general goals?"):
            self.app.clear_general_goals()

    # ---- backlog ----

    def render_backlog(self) -> None:
        self.console.print(render_backlog(self.app.get_backlog_items(), self.app.settings,
                                          show_ids=self.display.show_item_ids))

    def backlog_menu(self) -> None:
        self._menu("Backlog", [
            ("1", "Add item", self.add_backlog_item),
            ("2", "Edit item", lambda: self._edit_item(self._pick_item(self.app.get_backlog_items()))),
            ("3", "Delete item", lambda: self._delete_item(self._pick_item(self.app.get_backlog_items()))),
            ("4", "Reorder item", self.reorder_backlog_item),
            ("5", "Schedule item into this week", self.schedule_backlog_item),
            ("6", "Expand/collapse", self.app.toggle_backlog_sidebar),
            ("7", "Clear backlog", self.clear_backlog),
        ], render=self.render_backlog)

    def add_backlog_item(self) -> None:
        item = forms.prompt_new_item(self.console, self.app.settings.categories)
        self._say(f"Added '{self.app.add_backlog_item(item).name}' to backlog")

    def reorder_backlog_item(self) -> None:
        item = self._pick_item(self.app.get_backlog_items())
        if not self.app.reorder_backlog_item_in_category(item.id, item.category_id, self._ask_direction()):
            self.console.print("[yellow]Already at the edge of its category.[/yellow]")

    def schedule_backlog_item(self) -> None:
        item = self._pick_item(self.app.get_backlog_items())
        day = self._ask_day()
        hour = self._ask_hour()
        scheduled = self.app.schedule_backlog_item(item.id, day, hour)
        if scheduled:
            self._say(f"Scheduled '{scheduled.name}' on {DAY_NAMES[day]} {hour:02d}:00")

    def clear_backlog(self) -> None:
        if self._confirm("Clear ALL backlog items?"):
            self.app.clear_backlog_items()

    # ---- settings ----

    def render_settings(self) -> None:
        settings = self.app.settings
        categories = Table(title="Categories", show_header=True, header_style="bold")
        categories.add_column("Id")
        categories.add_column("Name")
        categories.add_column("Colour")
        for cat in settings.categories:
            sample = render_item(SchedulerItem(name=cat.color, category_id=cat.id), cat)
            categories.add_row(cat.id, cat.name, sample)
        self.console.print(categories)

        sleep = settings.sleep_schedule
        excluded_wake = ", ".join(DAY_CHOICES[d] for d in sleep.exclude_wake_days) or "none"
        excluded_sleep = ", ".join(DAY_CHOICES[d] for d in sleep.exclude_sleep_days) or "none"
        self.console.print(
            f"Sleep schedule: {'on' if sleep.enabled else 'off'} · wake {sleep.wake_time:02d}:00 "
            f"(skip {excluded_wake}) · sleep {sleep.sleep_time:02d}:00 (skip {excluded_sleep})"
        )

        tasks = Table(title="Recurring tasks", show_header=True, header_style="bold")
        tasks.add_column("#", justify="right")
        tasks.add_column("Name")
        tasks.add_column("Category")
        tasks.add_column("Slots")
        for index, task in enumerate(settings.standard_items, start=1):
            tasks.add_row(str(index), task.name, task.category_id, forms.format_slot_spec(task.schedule))
        self.console.print(tasks)
        self.console.print(f"Notifications: {'on' if settings.show_notifications else 'off'}")

    def settings_menu(self) -> None:
        manager = self.app.settings_manager
        self._menu("Settings", [
            ("1", "Add category", self.add_category),
            ("2", "Edit category", self.edit_category),
            ("3", "Delete category", self.delete_category),
            ("4", "Toggle sleep schedule",
             lambda: manager.set_sleep_enabled(not self.app.settings.sleep_schedule.enabled)),
            ("5", "Set sleep time", lambda: manager.set_sleep_time(self._ask_hour("Sleep hour (0-23)"))),
            ("6", "Set wake time", lambda: manager.set_wake_time(self._ask_hour("Wake hour (0-23)"))),
            ("7", "Toggle wake-up exclusion for a day", lambda: manager.toggle_wake_exclusion(self._ask_day())),
            ("8", "Toggle sleep exclusion for a day", lambda: manager.toggle_sleep_exclusion(self._ask_day())),
            ("9", "Add recurring task", self.add_standard_task),
            ("10", "Edit recurring task", self.edit_standard_task),
            ("11", "Delete recurring task", self.delete_standard_task),
            ("12", "Toggle notifications",
             lambda: manager.set_show_notifications(not self.app.settings.show_notifications)),
        ], render=self.render_settings)

    def _pick_category_id(self) -> str:
        return Prompt.ask("Category id", choices=[c.id for c in self.app.settings.categories])

    def add_category(self) -> None:
        name = Prompt.ask("Name", default="New Category")
        color = Prompt.ask("Colour (#rrggbb)", default="#95A5A6")
        self.app.settings_manager.add_category(name, color)

    def edit_category(self) -> None:
        category = self.app.get_category_by_id(self._pick_category_id())
        name = Prompt.ask("Name", default=category.name)
        color = Prompt.ask("Colour (#rrggbb)", default=category.color)
        self.app.settings_manager.update_category(category.id, name=name, color=color)

    def delete_category(self) -> None:
        category_id = self._pick_category_id()
        if self._confirm(f"Delete category '{category_id}'? Its items will show as Uncategorized."):
            self.app.settings_manager.delete_category(category_id)

    def _pick_standard_index(self) -> int:
        return IntPrompt.ask("Recurring task #") - 1

    def add_standard_task(self) -> None:
        task = forms.prompt_standard_task(self.console, self.app.settings.categories)
        self.app.settings_manager.add_standard_task(task)
        self._say(f"Added recurring task '{task.name}'")

    def edit_standard_task(self) -> None:
        index = self._pick_standard_index()
        items = self.app.settings.standard_items
        if not 0 <= index < len(items):
            raise SchedulerError("No such recurring task")
        task = forms.prompt_standard_task(self.console, self.app.settings.categories, existing=items[index])
        added = self.app.settings_manager.edit_standard_task(index, task)
        self._say(f"Updated '{task.name}' ({added} slots this week)")

    def delete_standard_task(self) -> None:
        index = self._pick_standard_index()
        if self._confirm("Delete this recurring task?"):
            removed = self.app.settings_manager.delete_standard_task(index)
            self._say(f"Deleted recurring task '{removed.name}'")
