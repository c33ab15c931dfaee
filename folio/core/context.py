from flask import current_app


def current_folio():
    """The Folio extension registered on the current app"""
    return current_app.extensions['folio']
