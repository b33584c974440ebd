"""Stop-word profiles used for language detection and keyword extraction."""

STOPWORDS: dict[str, frozenset[str]] = {
    "en": frozenset(
        """
        a about after all also an and any are as at be because been but by
        can could did do does for from had has have he her him his how i if
        in into is it its just me my not of on or our out she so some than
        that the their them then there these they this to up was we were
        what when which who will with would you your
        """.split()
    ),
    "es": frozenset(
        """
        al algo como con cuando de del desde donde el ella ellos en entre es
        esta este esto estoy fue ha hay la las le les lo los mas me mi muy
        nos para pero por porque que se sin sobre su sus también tengo un
        una uno y ya yo
        """.split()
    ),
    "fr": frozenset(
        """
        au aux avec ce ces cette dans de des du elle en est et été il ils je
        la le les leur lui mais me mes moi mon ne nous on ou par pas pour qu
        que qui sa se ses son sont sur ta te tes toi ton très tu un une vous
        y à ça
        """.split()
    ),
    "de": frozenset(
        """
        aber als am auch auf aus bei bin bis das dass dem den der des die
        doch du ein eine einem einen einer er es für hat ich ihr im in ist
        ja kein mit nach nicht noch nur oder sich sie sind so und uns von
        war was wie wir zu zum zur über
        """.split()
    ),
    "it": frozenset(
        """
        al alla anche che ci come con da dei del della delle di è gli ha ho
        il in io la le lei lo loro lui ma mi mio molto nel nella non per più
        quando questa questo se si sono su sua suo ti tu un una uno
        """.split()
    ),
    "pt": frozenset(
        """
        ao aos as com como da das de do dos ela ele eles em entre era essa
        esse está estou eu foi isso já mais mas me meu minha muito na não
        nas no nos o os para pela pelo por que se sem seu sua também tem um
        uma você é
        """.split()
    ),
    "nl": frozenset(
        """
        aan al als ben bij dat de deze die dit doen een en er geen had heb
        heeft het hij hoe ik in is je kan maar me met mijn naar niet nog nu
        of om onze ook op over te uit van voor was wat we wij zij zijn
        """.split()
    ),
}
