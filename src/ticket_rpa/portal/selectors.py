"""Selector chains for the helpdesk portal (Odoo web client + website login).

Each chain is ordered most-specific first. Chains that embed user-provided
text (ticket title, project, customer, assignee) are built by functions so
the text is quoted safely.
"""

from __future__ import annotations

import json

from ticket_rpa.browser.actions import text_contains_xpath


def _q(text: str) -> str:
    """Quote *text* for use inside ``:has-text(...)`` and attribute selectors.

    Non-ASCII characters stay literal: CSS strings do not understand ``\\uXXXX``.
    """
    return json.dumps(text, ensure_ascii=False)


def _xq(text: str) -> str:
    """Quote *text* as an XPath string literal.

    XPath literals have no escapes, so text holding both quote kinds is
    split into a ``concat()``.

    >>> print(_xq('Say "hi"'))
    'Say "hi"'
    """
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

LOGIN_TRIGGER: tuple[str, ...] = (
    "span.te_user_account_icon.d-block",
    "i.fa-user-circle-o",
    ".fa-user-circle-o",
    ".fa-user",
    'a.btn-link[href="#loginPopup"]',
    'a[href="#loginPopup"]',
    'a[href*="loginPopup"]',
    'a[href*="login" i]',
    'button[href*="login" i]',
)

LOGIN_MODAL: tuple[str, ...] = (
    "#loginRegisterPopup",
    '.modal-dialog[role="dialog"]',
)

EMAIL_INPUT: tuple[str, ...] = (
    "input#login",
    'input[name="login"]',
    'input[type="email"]',
    'input[name="email"]',
    'input[placeholder*="email" i]',
)

PASSWORD_INPUT: tuple[str, ...] = (
    "input#password",
    'input[type="password"]',
    'input[name="password"]',
)

LOGIN_SUBMIT: tuple[str, ...] = (
    'button[type="submit"]',
    'input[type="submit"]',
    'button[name*="login" i]',
)

LOGIN_ERROR: tuple[str, ...] = (
    ".alert-danger",
    ".error",
    ".login-error",
    '[data-testid*="error"]',
)

LOGGED_IN_INDICATORS: tuple[str, ...] = (
    ".o_menu_apps",
    ".o_main_navbar",
    ".o_control_panel",
    ".o_kanban_view",
    ".o_list_view",
    ".o_dropdown",
    ".user-info",
    ".profile",
    ".dashboard",
)

# Script used when no trigger is visible: click any login-ish link and
# force the website's login modal open.
FORCE_OPEN_LOGIN_SCRIPT = """() => {
    const triggers = document.querySelectorAll(
        'a[href*="login"], button[data-toggle*="modal"], .user-icon, .login-trigger');
    for (const trigger of triggers) {
        if (trigger && typeof trigger.click === 'function') {
            trigger.click();
            break;
        }
    }
    const modal = document.querySelector('#loginRegisterPopup');
    if (modal) {
        modal.style.display = 'block';
        modal.classList.add('show', 'in');
        modal.classList.remove('hide');
    }
}"""

# ---------------------------------------------------------------------------
# Project navigation
# ---------------------------------------------------------------------------

APP_MENU: tuple[str, ...] = (
    ".o_menu_toggle",
    ".o_navbar_apps_menu",
    ".o_menu_apps",
    'button[data-menu-xmlid="base.menu_administration"]',
    ".fa-th",
    "i.fa-th",
    ".navbar-toggler",
    ".menu-toggle",
    'button[aria-label*="menu" i]',
    'button[title*="menu" i]',
    '[data-toggle="dropdown"]',
    ".dropdown-toggle",
)

APP_MENU_FALLBACK = "button, .btn, a"

PROJECTS_LINK: tuple[str, ...] = (
    'a[href*="projects"]',
    '[data-testid*="projects"]',
    "text=Projects",
    "text=Project",
    '.o_menu_sections a:has-text("Project")',
    '.o_menu_sections a:has-text("Projects")',
)

PROJECTS_XPATH = text_contains_xpath(["a"], ["project"])


def project_card(project_name: str) -> tuple[str, ...]:
    """Chain for the project's kanban card on the Projects board."""
    q = _q(project_name)
    # The last word ("Support") is the loosest text match.
    last_word = project_name.split()[-1] if project_name.split() else project_name
    return (
        f".o_kanban_record:has-text({q})",
        f".o_kanban_card:has-text({q})",
        f".card:has-text({q})",
        f".project-card:has-text({q})",
        f"a:has-text({q})",
        f"div:has-text({q})",
        f"span:has-text({q})",
        f"text={project_name}",
        f"text={last_word}",
        f'[title*={q}]',
        f'[aria-label*={q}]',
    )


def project_xpath(project_name: str) -> str:
    """Last-resort XPath on the project name (or its last word)."""
    last_word = project_name.split()[-1] if project_name.split() else project_name
    return f"//*[contains(text(), {_xq(project_name)}) or contains(text(), {_xq(last_word)})]"


# ---------------------------------------------------------------------------
# Ticket creation
# ---------------------------------------------------------------------------

CREATE_BUTTON: tuple[str, ...] = (
    "button.o-kanban-button-new",
    '[data-testid*="create"]',
    "button.create",
    "a.create",
    "text=Create",
    "text=Add",
    "text=New",
)

CREATE_XPATH = text_contains_xpath(["button", "a"], ["create"])

FORM_VIEW: tuple[str, ...] = (
    ".o_form_view",
    ".modal-dialog",
    ".o_dialog",
    ".modal-content",
)

TITLE_INPUT: tuple[str, ...] = (
    'input[name="name"]',
    'input[name="title"]',
    'input[placeholder*="title" i]',
    'input[placeholder*="name" i]',
    'textarea[name="name"]',
    'textarea[name="title"]',
    "input.o_field_char",
    "textarea.o_field_text",
)

TITLE_FALLBACK = 'input[type="text"], input:not([type]), textarea'

DESCRIPTION_INPUT: tuple[str, ...] = (
    'textarea[name*="description"]',
    'textarea[placeholder*="description" i]',
    'input[name*="description"]',
)

ASSIGNEE_FIELD: tuple[str, ...] = (
    'select[name*="user"]',
    'select[name*="owner"]',
    'select[name*="assign"]',
    'select[name="user_ids"]',
    'select[name="user_id"]',
    'select[name="ownership"]',
    'select[name="assignee"]',
    'select[name="owner"]',
    ".o_field_many2one input",
    ".o_field_many2many input",
    'input[name*="user_id"]',
    'input[name*="user_ids"]',
    'input[name*="owner"]',
    'input[name*="assign"]',
    "div.o_field_many2one",
    "div.o_field_many2many",
    'div[data-field-name*="user"]',
    'div[data-field-name*="owner"]',
    'div[data-field-name*="assign"]',
    '[placeholder*="owner" i]',
    '[placeholder*="assign" i]',
    '[placeholder*="user" i]',
)

HIGHLIGHTED_OPTION: tuple[str, ...] = (
    ".dropdown-item.active",
    '[role="option"][aria-selected="true"]',
    ".o_dropdown_menu .active",
)


def assignee_options(assignee: str) -> tuple[str, ...]:
    """Dropdown option chain for *assignee*: full name first, then surname."""
    full = _q(assignee)
    surname = _q(assignee.split()[-1]) if assignee.split() else full
    return (
        f"text={assignee}",
        f".dropdown-item:has-text({full})",
        f".o_dropdown_menu li:has-text({full})",
        f"ul.dropdown-menu li:has-text({full})",
        f'[role="option"]:has-text({full})',
        f".dropdown-item:has-text({surname})",
        f".o_dropdown_menu li:has-text({surname})",
        f"ul.dropdown-menu li:has-text({surname})",
        f'[role="option"]:has-text({surname})',
    )


SUBMIT_BUTTON: tuple[str, ...] = (
    'button:has-text("Add")',
    "text=Add",
    "button.o_form_button_save",
    'button[name="action_confirm"]',
    'button[type="submit"]',
    'input[type="submit"]',
    'button.btn-primary:has-text("Add")',
    'button.btn-success:has-text("Add")',
    "button.btn-primary",
    "button.btn-success",
    'button:has-text("Save")',
    'button:has-text("Create")',
    'button:has-text("Submit")',
    "text=Save",
    "text=Create",
    "text=Submit",
)

SUBMIT_XPATH = text_contains_xpath(["button"], ["add", "save", "submit"])

TICKET_ID: tuple[str, ...] = (
    '[data-testid*="ticket-id"]',
    ".ticket-id",
    ".id",
)

DISCARD_BUTTON: tuple[str, ...] = (
    "text=Discard",
    'button[data-dismiss="modal"]',
    ".modal-footer button",
    "text=Cancel",
    "text=Close",
)

# ---------------------------------------------------------------------------
# Kanban board / detail view
# ---------------------------------------------------------------------------

KANBAN_CARDS = ".o_kanban_record, .kanban-card, .task-card"

RECENT_CARD: tuple[str, ...] = (
    ".o_kanban_record:first-child",
    ".o_kanban_record",
    ".kanban-card:first-child",
    ".kanban-card",
)

DETAIL_VIEW: tuple[str, ...] = (
    ".o_form_view",
    ".o_form_sheet",
    ".o_form_editable",
    'button:has-text("Edit")',
    ".o_control_panel",
)

CARD_INNER_LINK = "a, .oe_kanban_global_click, .o_kanban_record"


def ticket_cards(title: str) -> tuple[str, ...]:
    """Kanban card chain for a ticket title, most specific first."""
    q = _q(title)
    return (
        f".o_kanban_record:has-text({q})",
        f".kanban-card:has-text({q})",
        f".task-card:has-text({q})",
        f".card:has-text({q})",
        f"xpath=//div[contains(@class,'o_kanban_record')][.//text()[contains(., {_xq(title)})]]",
        f"text={title}",
    )


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------

EDIT_BUTTON: tuple[str, ...] = (
    'button:has-text("Edit")',
    'a:has-text("Edit")',
    "text=Edit",
    '.o_control_panel button:has-text("Edit")',
    '.o_cp_buttons button:has-text("Edit")',
    'button[data-testid*="edit"]',
    ".edit-button",
    '[aria-label*="edit" i]',
    "button.o_form_button_edit",
)

CUSTOMER_FIELD: tuple[str, ...] = (
    'div.o_field_widget[name*="partner"] input',
    'div.o_field_widget input[placeholder*="customer" i]',
    'input[name*="customer"]',
    'input[placeholder*="customer" i]',
    'select[name*="customer"]',
    'div[data-field-name*="customer"] input',
    '.o_field_many2one input[name*="partner"]',
    'input[name*="partner"]',
    'select[name*="partner"]',
    ".o_field_many2one.o_field_widget input",
    "div.o_row .o_field_many2one input",
)

AUTOCOMPLETE_OPTIONS = "ul.ui-autocomplete li, .ui-menu-item, .dropdown-item"


def customer_options(customer: str) -> tuple[str, ...]:
    """Dropdown option chain for *customer*."""
    q = _q(customer)
    return (
        f"text={customer}",
        f".dropdown-item:has-text({q})",
        f".o_dropdown_menu li:has-text({q})",
        f'[role="option"]:has-text({q})',
        f"ul.ui-autocomplete li:has-text({q})",
        f".ui-menu-item:has-text({q})",
    )


DESCRIPTION_TAB = '.nav-link:has-text("Description"), a:has-text("Description"), button:has-text("Description")'

DESCRIPTION_EDITOR: tuple[str, ...] = (
    ".tab-pane.active .note-editable",
    '.tab-pane[id*="description"] .note-editable',
    ".note-editing-area .note-editable",
    'div[data-field-name*="description"] .note-editable',
    'textarea[name*="description"]',
    'textarea[placeholder*="description" i]',
    'input[name*="description"]',
    'div[data-field-name*="description"] textarea',
    'div[data-field-name*="description"] input',
    ".o_field_text textarea",
    ".o_field_html .note-editable",
)

SAVE_BUTTON: tuple[str, ...] = (
    'button:has-text("Save")',
    "text=Save",
    'button[type="submit"]',
    "button.o_form_button_save",
    "text=Update",
    ".save-button",
)

# ---------------------------------------------------------------------------
# Chatter (log note)
# ---------------------------------------------------------------------------

LOG_NOTE_BUTTON: tuple[str, ...] = (
    'button:has-text("Log Note")',
    'a:has-text("Log Note")',
    "text=Log Note",
    ".o_chatter_button_log_note",
    ".log-note",
    'button[data-action*="log"]',
    'button[data-action*="note"]',
    'button:has-text("Log")',
    'a:has-text("Log")',
    "text=Log",
    'button:has-text("Note")',
    'a:has-text("Note")',
    "text=Note",
    'button[data-action="mail.action_mail_compose_message_wizard"]',
    '[title*="log" i]',
    '[title*="note" i]',
    '[aria-label*="log" i]',
    '[aria-label*="note" i]',
)

LOG_NOTE_TEXT: tuple[str, ...] = (
    'textarea[placeholder*="log" i]',
    'textarea[placeholder*="note" i]',
    'textarea[name*="body"]',
    'textarea[name*="message"]',
    'textarea[name*="comment"]',
    ".note-editable",
    "textarea.o_input",
    "textarea",
    'div[contenteditable="true"]',
    ".o_field_html .note-editable",
)

LOG_SUBMIT_BUTTON: tuple[str, ...] = (
    'button:has-text("Log"):not(:has-text("note"))',
    'button:has-text("Log"):not(:has-text("Note"))',
    'input[value="Log"]',
    'button[title="Log"]:not([title*="note"])',
    'button[aria-label="Log"]:not([aria-label*="note"])',
    '.o_composer button:has-text("Log")',
    '.o_mail_composer button:has-text("Log")',
    '.modal-footer button:has-text("Log")',
    '.o_chatter button:has-text("Log"):not(:has-text("note"))',
    'button[type="submit"]',
    'input[type="submit"]',
    "button.btn-primary",
    "button.btn-success",
    ".o_composer_button_send",
    'button[data-action="send"]',
    'button:has-text("Send")',
    'button:has-text("Submit")',
    'button:has-text("Post")',
    "text=Log",
)

LOG_SUBMIT_XPATH = (
    text_contains_xpath(["button"], ["log"])
    + ' | //input[contains(@value, "Log")] | //button[contains(@title, "Log")]'
)
