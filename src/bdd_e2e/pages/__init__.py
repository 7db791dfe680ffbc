from .actions import PageActions, PageObject
from .login_page import LoginPage
from .dashboard_page import DashboardPage

__all__ = ['PageActions', 'PageObject', 'LoginPage', 'DashboardPage']
