SECTION = "alphabetical-app-grid"

default_config = {
    "_section_hint": (
        "Configuration for alphagrid, which keeps the launcher grid and the "
        "contents of its folders in alphabetical order."
    ),
    SECTION: {
        "_section_hint": "Ordering policy for the app grid.",
        "logging-enabled": False,
        "logging-enabled_hint": (
            "Write diagnostic messages (why a reorder was triggered, which "
            "folders were sorted) to the log."
        ),
        "sort-folder-contents": True,
        "sort-folder-contents_hint": (
            "Alphabetically sort the apps stored inside each app folder."
        ),
        "folder-order-position": "alphabetical",
        "folder-order-position_hint": (
            "Where folders are placed: 'start' (before apps), 'end' (after "
            "apps) or 'alphabetical' (mixed in with apps by name)."
        ),
        "pinned-folders": [],
        "pinned-folders_hint": (
            "Folder ids in the order they should appear when folders are "
            "placed at the start or end. Unlisted folders follow by name."
        ),
    },
}
