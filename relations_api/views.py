"""HTML fragments for the chat pages."""
from html import escape


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{escape(title)}</title></head>\n"
        f"<body>\n{body}\n</body></html>\n"
    )


def _date(chat: dict) -> str:
    date = chat.get("date")
    return date.strftime("%Y-%m-%d %H:%M") if date is not None else ""


def render_index(chats: list[dict]) -> str:
    rows = []
    for chat in chats:
        cid = escape(str(chat["_id"]))
        rows.append(
            '<div class="chat">'
            f"<p>From: <i>{escape(chat.get('from', ''))}</i></p>"
            f"<p>{escape(chat.get('message', ''))}</p>"
            f"<p>To: <i>{escape(chat.get('to', ''))}</i></p>"
            f"<p><small>{_date(chat)}</small></p>"
            f'<a href="/chats/{cid}">Show</a> '
            f'<a href="/chats/{cid}/edit">Edit</a>'
            f'<form method="POST" action="/chats/{cid}">'
            '<input type="hidden" name="_method" value="DELETE">'
            "<button>Delete</button></form>"
            "</div>"
        )
    body = '<h1>All chats</h1>\n<a href="/chats/new">New chat</a>\n' + "\n".join(rows)
    return _page("Chats", body)


def render_new() -> str:
    body = (
        "<h1>New chat</h1>\n"
        '<form method="POST" action="/chats">'
        '<input name="from" placeholder="sender" required>'
        '<textarea name="message" maxlength="50" placeholder="message"></textarea>'
        '<input name="to" placeholder="recipient" required>'
        "<button>Send</button></form>"
    )
    return _page("New chat", body)


def render_show(chat: dict) -> str:
    body = (
        f"<h1>{escape(chat.get('from', ''))} &rarr; {escape(chat.get('to', ''))}</h1>\n"
        f"<p>{escape(chat.get('message', ''))}</p>\n"
        f"<p><small>{_date(chat)}</small></p>\n"
        '<a href="/chats">Back</a>'
    )
    return _page("Chat", body)


def render_edit(chat: dict) -> str:
    cid = escape(str(chat["_id"]))
    body = (
        "<h1>Edit chat</h1>\n"
        f'<form method="POST" action="/chats/{cid}">'
        '<input type="hidden" name="_method" value="PATCH">'
        f'<textarea name="message" maxlength="50">{escape(chat.get("message", ""))}</textarea>'
        "<button>Save</button></form>"
    )
    return _page("Edit chat", body)
