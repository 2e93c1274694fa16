from workflow.domain.models import ContentProvider, ImageItem, MediaStore, SavedCallback
from workflow.domain.observable import ObservableValue
