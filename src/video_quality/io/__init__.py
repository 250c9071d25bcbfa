"""Reading model sidecars and writing evaluation reports."""
