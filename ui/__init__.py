"""Terminal presentation: rich tables, spinners and InquirerPy menus."""
