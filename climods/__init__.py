"""CLIMods: browse the NUSMods catalogue and keep a list of the modules you plan to take."""
