"""
App Inviti - inviti e-mail con risposta, tracking aperture e QR di check-in.
"""
