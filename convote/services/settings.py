from flask import current_app

from convote.extensions import db
from convote.models import SystemSetting

NON_ADMIN_LOGIN_ENABLED = "non_admin_login_enabled"


def get_system_settings():
    # Read from the shared store on every call so every worker agrees.
    setting = SystemSetting.query.filter_by(setting_key=NON_ADMIN_LOGIN_ENABLED).first()
    enabled = True if setting is None else setting.setting_value == "true"
    return {"non_admin_login_enabled": enabled}


def set_non_admin_login_enabled(enabled):
    setting = SystemSetting.query.filter_by(setting_key=NON_ADMIN_LOGIN_ENABLED).first()
    value = "true" if enabled else "false"
    if setting is None:
        db.session.add(SystemSetting(setting_key=NON_ADMIN_LOGIN_ENABLED, setting_value=value))
    else:
        setting.setting_value = value
    db.session.commit()
    current_app.logger.info("Non-admin login %s", "enabled" if enabled else "disabled")
    return get_system_settings()
