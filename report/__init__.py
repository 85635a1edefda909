"""
App Report - report PDF delle attività e delle liste ospiti di un evento.
"""
