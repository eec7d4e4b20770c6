"""
Novara Scheduler — Telegram Bot.

The chat front end for a group. Members, weekly availability, goals and the
vibe are edited with commands; every change schedules a debounced re-plan,
and /plan, /book and /export act on the latest landed plans.

Each chat owns one PlanningController kept in chat_data.
"""

from __future__ import annotations

import asyncio
import io
import logging
from typing import TYPE_CHECKING

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from src.config import settings
from src.core.availability import DaySnapshot, member_day_windows
from src.core.booking import apply_plans
from src.core.controller import PlanningController
from src.core.ics_export import generate_ics
from src.core.planner import plan
from src.core.time_grid import (
    EDITING_DAY_ORDER,
    SLOT_MINUTES,
    WEEKDAY_NAMES,
    InvalidFormat,
    format_datetime,
    generate_slots,
    humanize_rrule,
    minutes_to_time,
    time_to_minutes,
)
from src.data.models import ApplyRequest, GoalType, Member, PlanResponse, Vibe, is_valid_email
from src.data.sample_data import GOAL_PRESETS, GOAL_TYPE_NAMES, priority_label

if TYPE_CHECKING:
    from src.ports.calendar_port import CalendarPort

logger = logging.getLogger(__name__)

COMMON_TIMEZONES = [
    ["UTC", "Europe/London", "Europe/Berlin"],
    ["America/New_York", "America/Chicago", "America/Los_Angeles"],
    ["Asia/Jerusalem", "Asia/Tokyo", "Australia/Sydney"],
]


# ---------------------------------------------------------------------------
# Per-chat state and parsing helpers
# ---------------------------------------------------------------------------


def _controller(context: ContextTypes.DEFAULT_TYPE) -> PlanningController:
    """Return this chat's controller, creating it on first use."""
    controller = context.chat_data.get("controller")
    if controller is None:
        controller = PlanningController(horizon_weeks=settings.PLAN_HORIZON_WEEKS)
        context.chat_data["controller"] = controller
    return controller


def _parse_day(text: str) -> int | None:
    """Parse 'mon', 'Monday' or '1' into a day number (Sunday=0)."""
    text = text.strip().lower()
    if text.isdigit():
        day = int(text)
        return day if 0 <= day <= 6 else None
    for index, name in enumerate(WEEKDAY_NAMES):
        if text in (name.lower(), name[:3].lower()):
            return index
    return None


def _parse_slot_range(text: str) -> list[str] | None:
    """Parse '18:00' or '18:00-20:00' into grid slots.

    Returns None for malformed clocks, times off the 30-minute grid, or an
    empty range.
    """
    parts = [p.strip() for p in text.split("-", 1)]
    try:
        start = time_to_minutes(parts[0])
        end = time_to_minutes(parts[1], end_of_day=True) if len(parts) == 2 else start + SLOT_MINUTES
    except InvalidFormat:
        return None
    if start % SLOT_MINUTES or end % SLOT_MINUTES:
        return None
    slots = generate_slots(minutes_to_time(start), minutes_to_time(end))
    return slots or None


def _resolve_member(controller: PlanningController, text: str) -> Member | None:
    """Find a member by ID, full name or first name (case-insensitive)."""
    text = text.strip()
    member = controller.get_member(text)
    if member is not None:
        return member
    wanted = text.casefold()
    for m in controller.state.members:
        if m.name.casefold() == wanted:
            return m
    for m in controller.state.members:
        if m.name.split()[0].casefold() == wanted:
            return m
    return None


def _member_names(controller: PlanningController, member_ids: list[str]) -> str:
    names = []
    for mid in member_ids:
        member = controller.get_member(mid)
        names.append(member.name if member else mid)
    return ", ".join(names)


# ---------------------------------------------------------------------------
# Planning: debounced passes with last-write-wins landing
# ---------------------------------------------------------------------------


def _planning_message(count: int) -> str:
    if count == 0:
        return "No suitable time slots found. Try adjusting availability or goals."
    return f"Generated {count} event{'' if count == 1 else 's'}"


async def _run_planning_pass(
    controller: PlanningController,
) -> tuple[PlanResponse | None, bool]:
    """Plan on a snapshot off the event loop, then land it.

    Returns the response (None on failure) and whether it was applied.
    """
    ticket = controller.begin_pass()
    try:
        response = await asyncio.to_thread(
            plan, ticket.request, None, controller.horizon_weeks,
        )
    except Exception as exc:
        logger.error("Planning pass %d failed: %s", ticket.generation, exc)
        controller.fail(ticket, str(exc))
        return None, False
    return response, controller.land(ticket, response)


async def _replan_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Job-queue callback for a debounced re-plan."""
    controller: PlanningController = context.job.data
    state = controller.state
    quiet = not state.members or not state.goals

    response, applied = await _run_planning_pass(controller)
    if response is None:
        await context.bot.send_message(
            chat_id=context.job.chat_id,
            text="Failed to generate schedule. Please try again.",
        )
        return
    if applied and not quiet:
        await context.bot.send_message(
            chat_id=context.job.chat_id,
            text=_planning_message(len(response.plans)),
        )


def _cancel_pending_replan(context: ContextTypes.DEFAULT_TYPE, chat_id: int) -> None:
    if context.job_queue is None:
        return
    for job in context.job_queue.get_jobs_by_name(f"replan:{chat_id}"):
        job.schedule_removal()


def _schedule_replan(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Queue a re-plan, replacing any that is still waiting."""
    if context.job_queue is None:
        logger.warning("No job queue available; automatic re-planning disabled")
        return
    chat_id = update.effective_chat.id
    _cancel_pending_replan(context, chat_id)
    context.job_queue.run_once(
        _replan_job,
        when=settings.PLAN_DEBOUNCE_SECONDS,
        chat_id=chat_id,
        name=f"replan:{chat_id}",
        data=_controller(context),
    )


def _format_plans(controller: PlanningController) -> str:
    plans = controller.state.plans
    if not plans:
        return "No planned events yet."
    lines = ["Planned events:\n"]
    for p in plans:
        lines.append(f"• {p.title} — {format_datetime(p.start)}")
        lines.append(f"   with {_member_names(controller, p.member_ids)}")
        if p.location:
            lines.append(f"   at {p.location}")
    skipped = len(controller.state.goals) - len(plans)
    if skipped > 0:
        lines.append(f"\n{skipped} goal(s) could not be placed in the next "
                     f"{controller.horizon_weeks} week(s).")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start — welcome message."""
    await update.message.reply_text(
        "Welcome to *Novara Scheduler*!\n\n"
        "I find times for your group's recurring plans:\n"
        "• Add people with /addmember and their free times with /avail\n"
        "• Describe what you want to do with /addgoal\n"
        "• I re-plan automatically; see results with /plan\n"
        "• Use /book to confirm or /export for a calendar file\n\n"
        "Try /sample for a demo group, or /help for all commands.",
        parse_mode="Markdown",
    )


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help — list available commands."""
    await update.message.reply_text(
        "Available commands:\n"
        "/addmember — Add a person to the group\n"
        "/members — List members\n"
        "/removemember — Remove a member\n"
        "/avail <member> <day> <HH:MM[-HH:MM]> [on|off] — Mark free time\n"
        "/week <member> — Show a member's weekly availability\n"
        "/copyday <member> <day> — Copy a day's availability\n"
        "/pasteday <member> <day> — Paste the copied day\n"
        "/addgoal — Add a recurring goal\n"
        "/goals — List goals\n"
        "/removegoal — Remove a goal\n"
        "/vibe <cozy|hype|professional> — Set the tone of event titles\n"
        "/plan — Plan now and show events\n"
        "/book — Book the planned events\n"
        "/export — Download the plan as an .ics file\n"
        "/sample — Load a demo group\n"
        "/reset — Clear everything",
    )


async def cmd_members(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /members — list the group."""
    controller = _controller(context)
    if not controller.state.members:
        await update.message.reply_text("No members yet. Add one with /addmember.")
        return
    lines = ["Members:\n"]
    for m in controller.state.members:
        lines.append(f"{m.id} — {m.name} <{m.email}> ({m.tz})")
    await update.message.reply_text("\n".join(lines))


async def cmd_removemember(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /removemember — show members as buttons to pick from."""
    controller = _controller(context)
    if not controller.state.members:
        await update.message.reply_text("No members to remove.")
        return
    keyboard = [
        [InlineKeyboardButton(m.name, callback_data=f"delmember:{m.id}")]
        for m in controller.state.members
    ]
    await update.message.reply_text(
        "Who should be removed? Their availability and goal seats go too.",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def _handle_removemember_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    query = update.callback_query
    await query.answer()
    member_id = query.data.split(":", 1)[1]
    controller = _controller(context)
    member = controller.get_member(member_id)
    if member is None or not controller.remove_member(member_id):
        await query.edit_message_text("Member not found or already removed.")
        return
    await query.edit_message_text(f"✅ Removed {member.name}.")
    _schedule_replan(update, context)


async def cmd_avail(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /avail <member> <day> <HH:MM[-HH:MM]> [on|off]."""
    args = context.args or []
    if len(args) < 3:
        await update.message.reply_text(
            "Usage: /avail <member> <day> <HH:MM[-HH:MM]> [on|off]\n"
            "Example: /avail alex mon 18:00-20:00"
        )
        return

    controller = _controller(context)
    member = _resolve_member(controller, args[0])
    if member is None:
        await update.message.reply_text(f"No member matches '{args[0]}'. See /members.")
        return
    day = _parse_day(args[1])
    if day is None:
        await update.message.reply_text("Day must be a name like 'mon' or a number 0-6 (0 = Sunday).")
        return
    slots = _parse_slot_range(args[2])
    if slots is None:
        await update.message.reply_text(
            f"Times must be HH:MM on the {SLOT_MINUTES}-minute grid, e.g. 18:00 or 18:00-20:00."
        )
        return
    mode = args[3].lower() if len(args) > 3 else "on"
    if mode not in ("on", "off"):
        await update.message.reply_text("The last argument must be 'on' or 'off'.")
        return

    for slot in slots:
        controller.toggle_slot(member.id, day, slot, make_available=(mode == "on"))

    await update.message.reply_text(
        f"{member.name} is now {'free' if mode == 'on' else 'busy'} on "
        f"{WEEKDAY_NAMES[day]} {slots[0]}–{minutes_to_time(time_to_minutes(slots[-1]) + SLOT_MINUTES)}.\n"
        f"{WEEKDAY_NAMES[day]}: {_describe_day(controller, member.id, day)}"
    )
    _schedule_replan(update, context)


def _describe_day(controller: PlanningController, member_id: str, day: int) -> str:
    windows = member_day_windows(controller.state.availability, member_id, day)
    if not windows:
        return "not available"
    return ", ".join(f"{w.start}–{w.end}" for w in windows)


async def cmd_week(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /week <member> — show the member's weekly windows."""
    args = context.args or []
    if not args:
        await update.message.reply_text("Usage: /week <member>")
        return
    controller = _controller(context)
    member = _resolve_member(controller, " ".join(args))
    if member is None:
        await update.message.reply_text(f"No member matches '{' '.join(args)}'. See /members.")
        return
    lines = [f"Weekly availability for {member.name}:\n"]
    for day in EDITING_DAY_ORDER:
        lines.append(f"{WEEKDAY_NAMES[day][:3]}: {_describe_day(controller, member.id, day)}")
    await update.message.reply_text("\n".join(lines))


async def cmd_copyday(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /copyday <member> <day> — copy a day's pattern to the clipboard."""
    args = context.args or []
    if len(args) != 2:
        await update.message.reply_text("Usage: /copyday <member> <day>")
        return
    controller = _controller(context)
    member = _resolve_member(controller, args[0])
    day = _parse_day(args[1])
    if member is None or day is None:
        await update.message.reply_text("Unknown member or day.")
        return
    snapshot = controller.copy_day(member.id, day)
    context.user_data["clipboard"] = snapshot
    await update.message.reply_text(
        f"Copied {WEEKDAY_NAMES[day]} for {member.name} ({len(snapshot.slots)} slot(s)). "
        "Paste it with /pasteday <member> <day>."
    )


async def cmd_pasteday(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /pasteday <member> <day> — overwrite a day with the clipboard."""
    args = context.args or []
    if len(args) != 2:
        await update.message.reply_text("Usage: /pasteday <member> <day>")
        return
    snapshot: DaySnapshot | None = context.user_data.get("clipboard")
    if snapshot is None:
        await update.message.reply_text("Nothing copied yet. Use /copyday first.")
        return
    controller = _controller(context)
    member = _resolve_member(controller, args[0])
    day = _parse_day(args[1])
    if member is None or day is None:
        await update.message.reply_text("Unknown member or day.")
        return
    controller.paste_day(member.id, snapshot, day)
    await update.message.reply_text(
        f"{WEEKDAY_NAMES[day]} for {member.name}: {_describe_day(controller, member.id, day)}"
    )
    _schedule_replan(update, context)


async def cmd_goals(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /goals — list goals with their schedule hint and priority."""
    controller = _controller(context)
    if not controller.state.goals:
        await update.message.reply_text("No goals yet. Add one with /addgoal.")
        return
    lines = ["Goals:\n"]
    for g in controller.state.goals:
        lines.append(
            f"{g.id} — {GOAL_TYPE_NAMES[g.type]}, {g.duration_mins}m, "
            f"priority {priority_label(g.priority)}"
        )
        lines.append(f"   {humanize_rrule(g.rrule)} · {_member_names(controller, g.participants) or 'no participants'}")
    await update.message.reply_text("\n".join(lines))


async def cmd_removegoal(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /removegoal — show goals as buttons to pick from."""
    controller = _controller(context)
    if not controller.state.goals:
        await update.message.reply_text("No goals to remove.")
        return
    keyboard = [
        [InlineKeyboardButton(
            f"{GOAL_TYPE_NAMES[g.type]} ({_member_names(controller, g.participants)})",
            callback_data=f"delgoal:{g.id}",
        )]
        for g in controller.state.goals
    ]
    await update.message.reply_text(
        "Which goal do you want to remove?",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def _handle_removegoal_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    query = update.callback_query
    await query.answer()
    goal_id = query.data.split(":", 1)[1]
    if not _controller(context).remove_goal(goal_id):
        await query.edit_message_text("Goal not found or already removed.")
        return
    await query.edit_message_text("✅ Goal removed, along with its planned event.")
    _schedule_replan(update, context)


async def cmd_vibe(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /vibe [name] — show or set the vibe."""
    controller = _controller(context)
    args = context.args or []
    options = ", ".join(v.value for v in Vibe)
    if not args:
        await update.message.reply_text(
            f"Current vibe: {controller.state.vibe.value}. Options: {options}"
        )
        return
    try:
        vibe = controller.set_vibe(args[0].lower())
    except ValueError:
        await update.message.reply_text(f"Unknown vibe '{args[0]}'. Options: {options}")
        return
    await update.message.reply_text(f"Vibe set to {vibe.value}.")
    _schedule_replan(update, context)


async def cmd_plan(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /plan — run a pass immediately and show the result."""
    controller = _controller(context)
    if not controller.state.members:
        await update.message.reply_text("Please add team members first.")
        return
    if not controller.state.goals:
        await update.message.reply_text("Please add scheduling goals first.")
        return

    _cancel_pending_replan(context, update.effective_chat.id)
    response, _ = await _run_planning_pass(controller)
    if response is None:
        await update.message.reply_text("Failed to generate schedule. Please try again.")
        return
    await update.message.reply_text(_planning_message(len(response.plans)))
    await update.message.reply_text(_format_plans(controller))


async def cmd_book(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /book — write the planned events to the calendar backend."""
    controller = _controller(context)
    plans = controller.state.plans
    if not plans:
        await update.message.reply_text("No events to book.")
        return

    calendar: CalendarPort = context.bot_data["calendar"]
    try:
        result = await apply_plans(
            ApplyRequest(plans=plans), calendar, controller.state.members,
        )
    except Exception as exc:
        logger.error("/book error: %s", exc)
        await update.message.reply_text("Failed to book events. Please try again.")
        return

    booked = len(result.created)
    msg = f"✅ Successfully booked {booked} event{'' if booked == 1 else 's'}!"
    if booked < len(plans):
        msg += f"\n⚠️ {len(plans) - booked} event(s) couldn't be booked."
    await update.message.reply_text(msg)


async def cmd_export(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /export — send the plans as an .ics attachment."""
    controller = _controller(context)
    if not controller.state.plans:
        await update.message.reply_text("No events to download.")
        return
    ics = generate_ics(controller.state.plans, controller.state.members)
    await update.message.reply_document(
        document=io.BytesIO(ics.encode("utf-8")),
        filename=settings.ICS_FILENAME,
        caption=f"{len(controller.state.plans)} event(s) ready to import.",
    )


async def cmd_sample(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /sample — replace the group with demo data."""
    controller = _controller(context)
    controller.load_sample()
    state = controller.state
    await update.message.reply_text(
        f"Sample data loaded! Added {len(state.members)} members, "
        f"availability schedules, and {len(state.goals)} goals."
    )
    _schedule_replan(update, context)


async def cmd_reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset — clear members, availability, goals and plans."""
    _cancel_pending_replan(context, update.effective_chat.id)
    _controller(context).reset()
    context.user_data.pop("clipboard", None)
    await update.message.reply_text("Everything cleared.")


# ---------------------------------------------------------------------------
# /addmember conversation
# ---------------------------------------------------------------------------

(
    MEMBER_NAME,
    MEMBER_EMAIL,
    MEMBER_TZ,
) = range(3)


async def cmd_addmember(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /addmember — start member creation conversation."""
    await update.message.reply_text("What's their name?")
    return MEMBER_NAME


async def addmember_name(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive name, ask for email."""
    name = update.message.text.strip()
    if not name:
        await update.message.reply_text("Please enter a name.")
        return MEMBER_NAME
    context.user_data["member_name"] = name
    await update.message.reply_text("What's their email address?")
    return MEMBER_EMAIL


async def addmember_email(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive email, ask for timezone."""
    email = update.message.text.strip()
    if not is_valid_email(email):
        await update.message.reply_text("That doesn't look like an email address. Try again.")
        return MEMBER_EMAIL
    context.user_data["member_email"] = email
    keyboard = ReplyKeyboardMarkup(COMMON_TIMEZONES, one_time_keyboard=True, resize_keyboard=True)
    await update.message.reply_text(
        "Which timezone are they in? Pick one or type any IANA name.",
        reply_markup=keyboard,
    )
    return MEMBER_TZ


async def addmember_tz(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive timezone and create the member."""
    controller = _controller(context)
    try:
        member = controller.add_member(
            name=context.user_data["member_name"],
            email=context.user_data["member_email"],
            tz=update.message.text.strip() or "UTC",
        )
    except ValueError as exc:
        logger.error("addmember error: %s", exc)
        await update.message.reply_text(
            f"Couldn't add member: {exc}", reply_markup=ReplyKeyboardRemove(),
        )
        _clear_member_data(context)
        return ConversationHandler.END

    await update.message.reply_text(
        f"✅ Added {member.name} (id {member.id}).\n"
        f"Mark their free time with /avail {member.name.split()[0].lower()} mon 18:00-20:00",
        reply_markup=ReplyKeyboardRemove(),
    )
    _clear_member_data(context)
    _schedule_replan(update, context)
    return ConversationHandler.END


def _clear_member_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for k in ("member_name", "member_email"):
        context.user_data.pop(k, None)


# ---------------------------------------------------------------------------
# /addgoal conversation
# ---------------------------------------------------------------------------

(
    GOAL_TYPE,
    GOAL_PARTICIPANTS,
    GOAL_DURATION,
    GOAL_PRIORITY,
) = range(3, 7)

_GOAL_TYPE_BY_LABEL = {name.lower(): goal_type for goal_type, name in GOAL_TYPE_NAMES.items()}


def _parse_goal_type(text: str) -> GoalType | None:
    text = text.strip().lower()
    if text in _GOAL_TYPE_BY_LABEL:
        return _GOAL_TYPE_BY_LABEL[text]
    try:
        return GoalType(text.replace(" ", "_").replace("-", "_"))
    except ValueError:
        return None


async def cmd_addgoal(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /addgoal — start goal creation conversation."""
    if not _controller(context).state.members:
        await update.message.reply_text("Please add team members first.")
        return ConversationHandler.END
    keyboard = ReplyKeyboardMarkup(
        [[GOAL_TYPE_NAMES[t] for t in GoalType]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text("What kind of goal?", reply_markup=keyboard)
    return GOAL_TYPE


async def addgoal_type(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive goal type, ask for participants."""
    goal_type = _parse_goal_type(update.message.text)
    if goal_type is None:
        await update.message.reply_text("Please pick one of the listed goal types.")
        return GOAL_TYPE
    context.user_data["goal_type"] = goal_type
    names = ", ".join(m.name.split()[0] for m in _controller(context).state.members)
    await update.message.reply_text(
        f"Who takes part? Send names or IDs separated by commas ({names}).",
        reply_markup=ReplyKeyboardRemove(),
    )
    return GOAL_PARTICIPANTS


async def addgoal_participants(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive participants, ask for duration."""
    controller = _controller(context)
    participants: list[str] = []
    for token in update.message.text.split(","):
        if not token.strip():
            continue
        member = _resolve_member(controller, token)
        if member is None:
            await update.message.reply_text(f"No member matches '{token.strip()}'. Try again.")
            return GOAL_PARTICIPANTS
        participants.append(member.id)
    if not participants:
        await update.message.reply_text("A goal needs at least one participant.")
        return GOAL_PARTICIPANTS
    context.user_data["goal_participants"] = participants

    preset = GOAL_PRESETS[context.user_data["goal_type"]]
    keyboard = ReplyKeyboardMarkup(
        [[str(preset.duration_mins), "30", "60", "120"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        f"How long (in minutes)? The preset is {preset.duration_mins}.",
        reply_markup=keyboard,
    )
    return GOAL_DURATION


async def addgoal_duration(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive duration, ask for priority."""
    try:
        duration = int(update.message.text.strip())
        if duration <= 0:
            raise ValueError
    except ValueError:
        await update.message.reply_text("Please enter a positive number of minutes (e.g., 60).")
        return GOAL_DURATION
    context.user_data["goal_duration"] = duration
    keyboard = ReplyKeyboardMarkup(
        [["1", "2", "3", "4", "5"]],
        one_time_keyboard=True,
        resize_keyboard=True,
    )
    await update.message.reply_text(
        "Priority from 1 (low) to 5 (high)?",
        reply_markup=keyboard,
    )
    return GOAL_PRIORITY


async def addgoal_priority(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Receive priority and create the goal."""
    try:
        priority = int(update.message.text.strip())
        if not 1 <= priority <= 5:
            raise ValueError
    except ValueError:
        await update.message.reply_text("Please enter a number from 1 to 5.")
        return GOAL_PRIORITY

    controller = _controller(context)
    try:
        goal = controller.add_goal(
            context.user_data["goal_type"],
            context.user_data["goal_participants"],
            duration_mins=context.user_data["goal_duration"],
            priority=priority,
        )
    except ValueError as exc:
        logger.error("addgoal error: %s", exc)
        await update.message.reply_text(
            f"Couldn't add goal: {exc}", reply_markup=ReplyKeyboardRemove(),
        )
        _clear_goal_data(context)
        return ConversationHandler.END

    await update.message.reply_text(
        f"✅ Added {GOAL_TYPE_NAMES[goal.type]} ({goal.duration_mins}m, "
        f"{humanize_rrule(goal.rrule)}) for {_member_names(controller, goal.participants)}.",
        reply_markup=ReplyKeyboardRemove(),
    )
    _clear_goal_data(context)
    _schedule_replan(update, context)
    return ConversationHandler.END


def _clear_goal_data(context: ContextTypes.DEFAULT_TYPE) -> None:
    for k in ("goal_type", "goal_participants", "goal_duration"):
        context.user_data.pop(k, None)


async def conversation_cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handle /cancel inside any conversation."""
    _clear_member_data(context)
    _clear_goal_data(context)
    await update.message.reply_text("Cancelled.", reply_markup=ReplyKeyboardRemove())
    return ConversationHandler.END


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------


def build_app(calendar: CalendarPort | None = None) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        calendar: Booking backend. Defaults to the adapter selected by
                  CALENDAR_PROVIDER.
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if calendar is None:
        from src.adapters.calendar_factory import create_calendar_adapter
        calendar = create_calendar_adapter()

    app.bot_data["calendar"] = calendar

    _text = filters.TEXT & ~filters.COMMAND
    app.add_handler(ConversationHandler(
        entry_points=[CommandHandler("addmember", cmd_addmember)],
        states={
            MEMBER_NAME: [MessageHandler(_text, addmember_name)],
            MEMBER_EMAIL: [MessageHandler(_text, addmember_email)],
            MEMBER_TZ: [MessageHandler(_text, addmember_tz)],
        },
        fallbacks=[CommandHandler("cancel", conversation_cancel)],
    ))
    app.add_handler(ConversationHandler(
        entry_points=[CommandHandler("addgoal", cmd_addgoal)],
        states={
            GOAL_TYPE: [MessageHandler(_text, addgoal_type)],
            GOAL_PARTICIPANTS: [MessageHandler(_text, addgoal_participants)],
            GOAL_DURATION: [MessageHandler(_text, addgoal_duration)],
            GOAL_PRIORITY: [MessageHandler(_text, addgoal_priority)],
        },
        fallbacks=[CommandHandler("cancel", conversation_cancel)],
    ))

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help", cmd_help))
    app.add_handler(CommandHandler("members", cmd_members))
    app.add_handler(CommandHandler("removemember", cmd_removemember))
    app.add_handler(CommandHandler("avail", cmd_avail))
    app.add_handler(CommandHandler("week", cmd_week))
    app.add_handler(CommandHandler("copyday", cmd_copyday))
    app.add_handler(CommandHandler("pasteday", cmd_pasteday))
    app.add_handler(CommandHandler("goals", cmd_goals))
    app.add_handler(CommandHandler("removegoal", cmd_removegoal))
    app.add_handler(CommandHandler("vibe", cmd_vibe))
    app.add_handler(CommandHandler("plan", cmd_plan))
    app.add_handler(CommandHandler("book", cmd_book))
    app.add_handler(CommandHandler("export", cmd_export))
    app.add_handler(CommandHandler("sample", cmd_sample))
    app.add_handler(CommandHandler("reset", cmd_reset))
    app.add_handler(CallbackQueryHandler(_handle_removemember_callback, pattern=r"^delmember:\w+$"))
    app.add_handler(CallbackQueryHandler(_handle_removegoal_callback, pattern=r"^delgoal:\w+$"))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logger.info("Starting Novara Scheduler bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
