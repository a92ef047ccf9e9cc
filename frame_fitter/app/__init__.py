"""Host-facing application layer.

- EditSession: current file, background, basename and one GestureController
  per target frame.
- state.PreviewState: Qt adapter exposing one preview's gesture state as
  signals/properties.
"""
