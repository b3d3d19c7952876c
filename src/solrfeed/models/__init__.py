"""Value models shared by the adapter, translator and HTTP layers."""
