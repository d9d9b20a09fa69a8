"""
Calendar and device exports.

- iCalendar (.ics): one event per training session of a week
- Training Center XML (.tcx): one structured session for GPS watches

Session dates follow the plan start date: week N starts (N - 1) * 7 days
after it, and each session falls on the next occurrence of its weekday.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from lxml import etree

from runplan.plan_schemas import BlockKind, Program, Session, Weekday
from runplan.schemas import EstimationConfig
from runplan.tracking import get_week
from runplan.workouts import block_minutes

TCX_NAMESPACE = "http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
TCX_SCHEMA_LOCATION = (
    f"{TCX_NAMESPACE} http://www.garmin.com/xmlschemas/TrainingCenterDatabasev2.xsd"
)

PRODUCT_ID = "-//runplan//Running Program//EN"
DEFAULT_START_TIME = time(18, 0)
DEFAULT_EVENT_MINUTES = 60


def session_date(program: Program, week_number: int, day: Weekday) -> date:
    """Calendar date of a session, counted from the plan start date."""
    start = program.start_date
    day_offset = (day.position - start.weekday() + 7) % 7
    return start + timedelta(days=(week_number - 1) * 7 + day_offset)


# ============================================================================
# iCalendar
# ============================================================================


def _ics_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def _ics_local(dt: datetime) -> str:
    return dt.strftime("%Y%m%dT%H%M%S")


def _ics_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def session_description(session: Session) -> str:
    """One line per block: [kind] details."""
    return "\n".join(f"[{block.kind.value}] {block.details}" for block in session.structure)


def generate_ics(
    program: Program,
    week_number: int,
    now: Optional[datetime] = None,
    start_time: time = DEFAULT_START_TIME,
) -> str:
    """
    Build an iCalendar document for one week of the program.

    Rest days are skipped. Events use floating local time so they land at
    `start_time` in whatever timezone the calendar is in.

    Raises:
        WeekNotFoundError: If the week is not part of the program
    """
    week = get_week(program, week_number)
    stamp = _ics_utc(now or datetime.now(timezone.utc))

    lines: List[str] = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODUCT_ID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]

    for session in week.training_sessions():
        start = datetime.combine(session_date(program, week_number, session.day), start_time)
        end = start + timedelta(minutes=session.duration_minutes or DEFAULT_EVENT_MINUTES)
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{session.id}-{program.id}@runplan",
                f"DTSTAMP:{stamp}",
                f"DTSTART:{_ics_local(start)}",
                f"DTEND:{_ics_local(end)}",
                f"SUMMARY:{_ics_escape(session.title)}",
                f"DESCRIPTION:{_ics_escape(session_description(session))}",
                "END:VEVENT",
            ]
        )

    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


# ============================================================================
# TCX
# ============================================================================


def _iso_utc(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def generate_tcx(
    session: Session,
    start: datetime,
    estimation: Optional[EstimationConfig] = None,
) -> str:
    """
    Build a TCX document describing one session.

    Each timed block becomes a Lap (main sets are Active, the rest Resting);
    info blocks carry no time and are only kept in the activity notes.
    A naive `start` is read as local time and written out in UTC.
    """
    nsmap = {None: TCX_NAMESPACE, "xsi": XSI_NAMESPACE}

    def tcx(tag: str) -> str:
        return f"{{{TCX_NAMESPACE}}}{tag}"

    root = etree.Element(tcx("TrainingCenterDatabase"), nsmap=nsmap)
    root.set(f"{{{XSI_NAMESPACE}}}schemaLocation", TCX_SCHEMA_LOCATION)

    activities = etree.SubElement(root, tcx("Activities"))
    activity = etree.SubElement(activities, tcx("Activity"), Sport="Running")
    etree.SubElement(activity, tcx("Id")).text = _iso_utc(start)

    elapsed = 0
    notes = [f"{session.title} - {session.session_type.value}"]
    for block in session.structure:
        if block.kind == BlockKind.INFO:
            notes.append(block.details)
            continue

        seconds = block_minutes(block, estimation) * 60
        lap = etree.SubElement(
            activity, tcx("Lap"), StartTime=_iso_utc(start + timedelta(seconds=elapsed))
        )
        etree.SubElement(lap, tcx("TotalTimeSeconds")).text = str(seconds)
        etree.SubElement(lap, tcx("DistanceMeters")).text = str(
            int(round((block.distance_km or 0) * 1000))
        )
        etree.SubElement(lap, tcx("Intensity")).text = (
            "Active" if block.kind == BlockKind.MAIN_SET else "Resting"
        )
        etree.SubElement(lap, tcx("TriggerMethod")).text = "Manual"
        etree.SubElement(lap, tcx("Notes")).text = block.details
        elapsed += seconds

    etree.SubElement(activity, tcx("Notes")).text = "\n".join(notes)
    creator = etree.SubElement(activity, tcx("Creator"))
    creator.set(f"{{{XSI_NAMESPACE}}}type", "Device_t")
    etree.SubElement(creator, tcx("Name")).text = "runplan"

    return etree.tostring(
        root, xml_declaration=True, encoding="UTF-8", pretty_print=True
    ).decode("utf-8")


def session_start(program: Program, week_number: int, session: Session) -> datetime:
    """Default start datetime of a session for device export."""
    return datetime.combine(session_date(program, week_number, session.day), DEFAULT_START_TIME)
