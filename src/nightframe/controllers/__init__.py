"""Controllers: classes discovered from the routes directory.

One ``.py`` file per controller. The directory walk, import, and
validation live in :mod:`nightframe.controllers.discovery`.
"""
