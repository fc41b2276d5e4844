# src/teamtask/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..activity.activity_store import ActivityStore
from ..auth.account_service import AccountService
from ..auth.credentials import CredentialService
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore
from ..users.user_service import UserService
from ..users.user_store import UserStore
from .db import Database


@dataclass
class AppState:
    # Settings kept on the state for easy access from routes and the CLI.
    settings: object

    db: Database
    users: UserStore
    tasks: TaskStore
    activity: ActivityStore

    credentials: CredentialService
    accounts: AccountService
    task_service: TaskService
    user_service: UserService
