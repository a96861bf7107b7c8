from lectro.models.activity_log import ActivityLog  # noqa: F401
from lectro.models.attendance import AttendanceRecord  # noqa: F401
from lectro.models.equipment_issue import EquipmentIssue, IssueStatus  # noqa: F401
from lectro.models.hall import LectureHall  # noqa: F401
from lectro.models.notification import Notification, NotificationType  # noqa: F401
from lectro.models.subject import Enrollment, Subject  # noqa: F401
from lectro.models.swap_request import SwapRequest, SwapStatus  # noqa: F401
from lectro.models.timetable import TimetableEntry  # noqa: F401
from lectro.models.user import User, UserRole  # noqa: F401
