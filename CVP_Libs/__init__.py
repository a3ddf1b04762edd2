"""
CVP_Libs - CV Photo Studio Library Modules

This package contains core functionality for the CV Photo Studio project,
organized into specialized sub-packages:

- GeometryLib: Pure crop/zoom/rotation/layout math
- ImageEditingLib: Image models, filters, background templates
- CaptureLib: Camera stream lifecycle and file ingestion
- CropLib: Interactive crop gesture state machine and rasterization
- NodesLib: Registry-executable wrappers around each pipeline stage
- WorkflowLib: Node executor registry and the photo workflow orchestrator
- ProjStoreLib: Session, local record store and the résumé CRUD API
- IntakeLib: Résumé field extraction from free text
"""

__version__ = "0.1.0"
