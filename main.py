#!/usr/bin/env python3
"""
Label PR Desk - Interactive Menu Launcher
Run this file to access all CLI commands through a simple menu.

Usage:
    python main.py
"""

import subprocess
import sys
import os

# Ensure we're running from the project root with the venv python
PYTHON = sys.executable
LABELPR = [PYTHON, "-m", "labelpr.cli.main"]

# Project root on PYTHONPATH so 'labelpr' package is importable
ENV = os.environ.copy()
ENV["PYTHONPATH"] = os.path.dirname(os.path.abspath(__file__))


def run(args: list[str]):
    """Run a CLI command and return to menu when done."""
    print()
    subprocess.run(LABELPR + args, env=ENV)
    print()
    input("  Press Enter to return to menu...")


def prompt(label: str, required: bool = True) -> str:
    """Prompt user for input. Returns empty string if optional and skipped."""
    while True:
        value = input(f"  {label}: ").strip()
        if value:
            return value
        if not required:
            return ""
        print("  (required - please enter a value)")


def prompt_optional(label: str) -> str:
    return prompt(f"{label} (optional, Enter to skip)", required=False)


def clear():
    os.system("cls" if os.name == "nt" else "clear")


# =============================================================================
# COMMAND HANDLERS
# =============================================================================

def _list_partition(partition: str):
    args = ["contacts", "list", "--partition", partition]
    s = prompt_optional("Search by name")
    if s: args += ["--search", s]
    run(args)


def contacts_list():
    args = ["contacts", "list", "--partition", "contacts"]
    c = prompt_optional("Filter by category (Blogger/Artist/Agency/Media)")
    s = prompt_optional("Search by name")
    if c: args += ["--category", c]
    if s: args += ["--search", s]
    run(args)

def label_artists_list():
    _list_partition("label_artists")

def curators_list():
    _list_partition("platform_contacts")

def contacts_show():
    cid = prompt("Contact ID")
    run(["contacts", "show", cid])

def contacts_add():
    run(["contacts", "add"])

def contacts_edit():
    cid = prompt("Contact ID")
    args = ["contacts", "edit", cid]
    c = prompt_optional("New category (Blogger/Artist/Agency/Media/Label Artist/Platform Curator)")
    r = prompt_optional("New reach")
    n = prompt_optional("New notes")
    t = prompt_optional("New tags, comma separated")
    if c: args += ["--category", c]
    if r: args += ["--reach", r]
    if n: args += ["--notes", n]
    if t: args += ["--tags", t]
    run(args)

def contacts_delete():
    cid = prompt("Contact ID")
    run(["contacts", "delete", cid])

def tracks_list():
    args = ["tracks", "list"]
    s = prompt_optional("Search by title or artist")
    if s: args += ["--search", s]
    run(args)

def tracks_add():
    run(["tracks", "add"])

def tracks_delete():
    tid = prompt("Track ID")
    run(["tracks", "delete", tid])

def plans_list():
    run(["plans", "list"])

def plans_show():
    pid = prompt("Plan ID")
    run(["plans", "show", pid])

def plans_add():
    run(["plans", "add"])

def plans_toggle():
    pid = prompt("Plan ID")
    tid = prompt("Task ID")
    run(["plans", "toggle", pid, tid])

def plans_add_task():
    pid = prompt("Plan ID")
    label = prompt("Task label")
    run(["plans", "add-task", pid, label])

def links_list():
    run(["links", "list"])

def links_add():
    run(["links", "add"])

def stats():
    run(["stats"])

def pitch():
    cid = prompt("Contact ID")
    context = prompt("News hook (release, premiere, tour)")
    args = ["pitch", cid, "--context", context]
    model = input("  AI model - gemini-flash, claude or deepseek-chat (default: gemini-flash): ").strip().lower()
    if model in ("gemini-flash", "claude", "deepseek-chat"): args += ["--model", model]
    run(args)

def smart_import():
    path = prompt("Path to a text file with names, links, release dates and plans")
    args = ["import", "--file", path]
    skip = input("  Skip contacts that already exist? (y/N): ").strip().lower()
    if skip == "y": args += ["--skip-duplicates"]
    run(args)

def export():
    path = prompt_optional("Export file (default: data/export.json)") or "data/export.json"
    run(["export", path])

def restore():
    path = prompt("Export file to restore")
    run(["restore", path])


# =============================================================================
# MENU LAYOUT
# =============================================================================

MENU = [
    ("CONTACTS", [
        ("List PR contacts",             contacts_list),
        ("List label artists",           label_artists_list),
        ("List platform curators",       curators_list),
        ("Show contact details",         contacts_show),
        ("Add new contact",              contacts_add),
        ("Edit contact",                 contacts_edit),
        ("Delete contact",               contacts_delete),
    ]),
    ("CATALOGUE", [
        ("List tracks",                  tracks_list),
        ("Add track",                    tracks_add),
        ("Delete track",                 tracks_delete),
    ]),
    ("RELEASE PLANS", [
        ("List plans",                   plans_list),
        ("Show plan checklist",          plans_show),
        ("Add plan",                     plans_add),
        ("Toggle a task",                plans_toggle),
        ("Add a task",                   plans_add_task),
    ]),
    ("RESOURCES", [
        ("List quick links",             links_list),
        ("Add quick link",               links_add),
        ("Label statistics",             stats),
    ]),
    ("AI FEATURES", [
        ("Draft a pitch",                pitch),
        ("Smart import from text",       smart_import),
    ]),
    ("DATA", [
        ("Export store to JSON",         export),
        ("Restore store from JSON",      restore),
    ]),
]


def print_menu():
    clear()
    print("=" * 50)
    print("   LABEL PR DESK")
    print("=" * 50)

    n = 1
    numbering = {}  # maps display number -> handler function

    for section, commands in MENU:
        print(f"\n  {section}")
        print(f"  {'-' * len(section)}")
        for label, handler in commands:
            print(f"  {n:>2}.  {label}")
            numbering[n] = handler
            n += 1

    print("\n" + "=" * 50)
    print("   0.  Exit")
    print("=" * 50)
    return numbering


def main():
    while True:
        numbering = print_menu()

        try:
            choice = input("\n  Select a command: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n  Goodbye!\n")
            break

        if choice == "0" or choice.lower() in ("q", "quit", "exit"):
            print("\n  Goodbye!\n")
            break

        try:
            n = int(choice)
            if n in numbering:
                clear()
                numbering[n]()
            else:
                print(f"\n  Invalid selection: {choice}")
                input("  Press Enter to continue...")
        except ValueError:
            print(f"\n  Please enter a number.")
            input("  Press Enter to continue...")


if __name__ == "__main__":
    main()
