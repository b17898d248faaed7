from .crud_user import user
from .crud_city import city
from .crud_salon import salon
from .crud_artist import artist
from .crud_tattoo import tattoo
from .crud_tag import tag
from .crud_contact_inquiry import contact_inquiry

# Usage: `crud.artist.find_by_slug(db, slug)`
