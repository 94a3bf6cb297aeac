"""Core building blocks shared by the controller, dispatch and API layers."""
