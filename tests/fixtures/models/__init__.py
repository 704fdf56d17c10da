# Package marker; the model loader skips it.
