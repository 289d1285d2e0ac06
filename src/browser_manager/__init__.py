"""
browser-manager: version resolution for Chromium-family browsers.
"""
