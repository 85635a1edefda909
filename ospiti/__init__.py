"""
App Ospiti - lista ospiti, piano tavoli, check-in e badge.
"""
