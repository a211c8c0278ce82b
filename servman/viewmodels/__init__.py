"""ViewModel package for UI state and command surfaces.

Call context:
    ``servman/app/user_screen.py`` binds these viewmodels to use-case calls
    and writes delivered results back into them.

Dependencies:
    Modules in this package depend on domain types only. I/O adapters and
    use-case orchestration remain outside.

Responsibilities:
    - Expose mutable UI state and command intent callbacks.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
