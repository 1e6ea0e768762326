"""HTML pages served to people going through the signup flow."""

from __future__ import annotations

from html import escape
from typing import Optional

_LAYOUT = """<!DOCTYPE html>
<html lang="fr">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{title} | Agent Gmail</title>
  <link rel="stylesheet" href="/static/styles.css">
</head>
<body>
  <main class="card">
{body}
  </main>
  <footer><a href="/mentions-legales">Mentions légales</a></footer>
</body>
</html>
"""


def _render(title: str, body: str) -> str:
    return _LAYOUT.format(title=escape(title), body=body)


def render_index(*, google_configured: bool, store_configured: bool) -> str:
    notices = []
    if not google_configured:
        notices.append(
            '<p class="notice">La connexion Google n\'est pas encore configurée '
            "sur ce serveur.</p>"
        )
    if not store_configured:
        notices.append(
            '<p class="notice">Le stockage des connexions n\'est pas configuré : '
            "les accès ne seront pas enregistrés.</p>"
        )
    body = f"""    <h1>Connectez votre boîte Gmail</h1>
    <p>Renseignez votre entreprise puis autorisez l'accès à Gmail avec votre compte Google.</p>
    {''.join(notices)}
    <form method="post" action="/register">
      <label for="companyName">Nom de l'entreprise</label>
      <input id="companyName" name="companyName" type="text" required>
      <label for="contactEmail">Email de contact</label>
      <input id="contactEmail" name="contactEmail" type="email" required>
      <button type="submit">Continuer avec Google</button>
    </form>"""
    return _render("Inscription", body)


def render_error(title: str, message: str, detail: Optional[str] = None) -> str:
    body = f"""    <h1>{escape(title)}</h1>
    <p>{escape(message)}</p>"""
    if detail:
        body += f"\n    <pre class=\"detail\">{escape(detail)}</pre>"
    body += '\n    <p><a href="/">Retour au formulaire</a></p>'
    return _render(title, body)


def render_success(
    *, company_name: str, user_email: Optional[str], saved: bool
) -> str:
    account = escape(user_email) if user_email else "votre compte Google"
    if saved:
        status_line = "<p>Votre connexion a bien été enregistrée.</p>"
    else:
        status_line = (
            '<p class="notice">L\'accès a été accordé, mais la connexion n\'a pas pu '
            "être enregistrée. Notre équipe vous recontactera si nécessaire.</p>"
        )
    body = f"""    <h1>Accès accordé</h1>
    <p>Merci ! {escape(company_name)} a autorisé l'accès Gmail pour {account}.</p>
    {status_line}"""
    return _render("Accès accordé", body)


def render_legal() -> str:
    body = """    <h1>Mentions légales</h1>
    <p>Les informations saisies (nom de l'entreprise, email de contact) et les jetons
    d'accès Google sont utilisés uniquement pour fournir le service de l'agent Gmail.</p>
    <p>Vous pouvez révoquer l'accès à tout moment depuis les paramètres de sécurité
    de votre compte Google.</p>"""
    return _render("Mentions légales", body)


__all__ = ["render_error", "render_index", "render_legal", "render_success"]
