# Delivery backend — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.sequence_counter import SequenceCounter       # noqa
from app.models.user import User                              # noqa
from app.models.address import Address                        # noqa
from app.models.rider_car import RiderCar                     # noqa
from app.models.delivery import Delivery                      # noqa
from app.models.assignment import DeliveryAssignment          # noqa
from app.models.rider_location import RiderLocation           # noqa
