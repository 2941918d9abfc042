"""Built-in formatter settings, in the same shape as a configuration file.

Style guide for split commands:

    set(
      file_list
      foo.cpp
      bar.cpp
    )
"""

_SCOPES = ["INTERFACE", "PUBLIC", "PRIVATE"]

DEFAULT_SETTINGS = {
    "useTabs": False,
    "tabWidth": 2,
    "endOfLine": "\n",
    "printWidth": 80,
    "commands": {
        "add_library": {
            "controlKeywords": [
                "STATIC",
                "SHARED",
                "MODULE",
                "OBJECT",
                "INTERFACE",
                "UNKNOWN",
                "ALIAS",
            ],
            "options": ["GLOBAL", "EXCLUDE_FROM_ALL", "IMPORTED"],
        },
        "add_executable": {
            "options": [
                "WIN32",
                "MACOSX_BUNDLE",
                "EXCLUDE_FROM_ALL",
                "IMPORTED",
                "ALIAS",
            ],
        },
        "target_sources": {
            "controlKeywords": _SCOPES + ["FILE_SET", "TYPE", "BASE_DIRS", "FILES"],
            "options": ["HEADERS", "CXX_MODULES"],
        },
        "target_compile_definitions": {
            "controlKeywords": _SCOPES,
        },
        "target_compile_options": {
            "controlKeywords": _SCOPES,
            "options": ["BEFORE"],
        },
        "target_include_directories": {
            "controlKeywords": _SCOPES,
            "options": ["SYSTEM", "AFTER", "BEFORE"],
        },
        "target_link_libraries": {
            "controlKeywords": _SCOPES + ["LINK_PUBLIC", "LINK_PRIVATE", "LINK_INTERFACE_LIBRARIES"],
        },
        "target_link_options": {
            "controlKeywords": _SCOPES,
            "options": ["BEFORE"],
        },
        "install": {
            "controlKeywords": [
                "TARGETS",
                "FILES",
                "PROGRAMS",
                "DIRECTORY",
                "EXPORT",
                "ARCHIVE",
                "LIBRARY",
                "RUNTIME",
                "INCLUDES",
                "DESTINATION",
                "PERMISSIONS",
                "CONFIGURATIONS",
                "COMPONENT",
                "NAMESPACE",
                "RENAME",
                "FILE",
            ],
            "options": ["OPTIONAL", "EXCLUDE_FROM_ALL", "NAMELINK_SKIP", "NAMELINK_ONLY"],
        },
    },
}
