from .account import AccountSettingsPage
from .dashboard import FacilityMap, IncidentFeed, MainDashboard
from .directory import ColleagueDirectoryPage
from .incidents import AllIncidentsPage, IncidentDetailPage
from .login import LoginScreen
from .messaging import MessagingInbox, NewMessageDialog
from .nav import DashboardNav
from .report import SubmitReportForm, SubmitReportPage
from .schedule import WorkSchedulePage
from .toasts import toast_stack, use_toasts

__all__ = [
    "AccountSettingsPage",
    "AllIncidentsPage",
    "ColleagueDirectoryPage",
    "DashboardNav",
    "FacilityMap",
    "IncidentDetailPage",
    "IncidentFeed",
    "LoginScreen",
    "MainDashboard",
    "MessagingInbox",
    "NewMessageDialog",
    "SubmitReportForm",
    "SubmitReportPage",
    "WorkSchedulePage",
    "toast_stack",
    "use_toasts",
]
