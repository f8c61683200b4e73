"""Example: drive the role engine directly (no Flask).

Controllers are a thin layer; the rules live in the services.
"""

import importlib
import sys

from config import get_settings_module

from src.employee_portal.employee_portal.container import build_container


def main(acting_external_id: str, target_profile_id: str, action: str = "promote"):
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=vars(settings))
    outcome = container.role_engine.apply_transition(acting_external_id, int(target_profile_id), action)
    if outcome.ok:
        print(f"new role: {outcome.result.new_role.value} warnings={list(outcome.result.warnings)}")
    else:
        print(f"rejected: {outcome.error_code}: {outcome.error}")


if __name__ == "__main__":
    main(*sys.argv[1:])
