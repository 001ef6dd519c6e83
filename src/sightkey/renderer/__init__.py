"""pygame drawing for the staff, the keyboard and the HUD."""
