from flask import Blueprint, render_template, request, redirect, url_for, flash, session, current_app
from crane_crm import db
from crane_crm.errors import RemoteError
from crane_crm.models.user import User
from crane_crm.services import commit_or_raise

auth_bp = Blueprint("auth", __name__)


def _is_safe_next(next_url):
    # オープンリダイレクト対策: / で始まる相対パスのみ許可
    return bool(next_url) and next_url.startswith("/") and not next_url.startswith("//") and not next_url.startswith("/\\")


@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    if session.get("user_id"):
        return redirect(url_for("main.index"))
    next_url = request.values.get("next")
    if request.method == "POST":
        login_id = request.form.get("login_id", "").strip()
        password = request.form.get("password", "")
        user = User.query.filter_by(login_id=login_id).first()
        if user and user.check_password(password):
            if not user.is_active:
                flash("This account is not active yet. Please contact an administrator.", "danger")
                current_app.logger.info("[AUTH] inactive login login_id=%s", login_id)
            else:
                session.clear()
                session["user_id"] = user.id
                flash("Logged in.", "success")
                current_app.logger.info("[AUTH] login user_id=%s role=%s", user.id, user.role)
                if _is_safe_next(next_url):
                    return redirect(next_url)
                return redirect(url_for("main.index"))
        else:
            flash("Invalid login ID or password.", "danger")
            current_app.logger.info("[AUTH] failed login login_id=%s", login_id)
    return render_template("login.html", next=next_url)


@auth_bp.route("/logout")
def logout():
    session.clear()
    flash("Logged out.", "info")
    return redirect(url_for("auth.login"))


@auth_bp.route("/register", methods=["GET", "POST"])
def register():
    if request.method == "POST":
        login_id = request.form.get("login_id", "").strip()
        display_name = request.form.get("display_name", "").strip()
        password = request.form.get("password", "")
        error = None
        if not login_id or not display_name or not password:
            error = "Please fill in all fields."
        elif len(password) < 8:
            error = "Password must be at least 8 characters."
        elif User.query.filter_by(login_id=login_id).first():
            error = "This login ID is already registered."
        if error:
            flash(error, "danger")
            return render_template("register.html", login_id=login_id, display_name=display_name)
        # 新規ユーザーは管理者が有効化するまでログイン不可
        user = User(login_id=login_id, display_name=display_name, role="sales_agent", is_active=False)
        user.set_password(password)
        db.session.add(user)
        try:
            commit_or_raise("registering user")
        except RemoteError as e:
            flash(e.message, "danger")
            return render_template("register.html", login_id=login_id, display_name=display_name)
        flash("Registration complete. An administrator will activate your account.", "success")
        return redirect(url_for("auth.login"))
    return render_template("register.html")
